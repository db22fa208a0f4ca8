"""orchestrator.py
Page orchestration for the earthquake dashboard.

The orchestrator owns every piece of mutable page state (selected day, marker
set, status) in one ``AppState`` and drives the fetch -> normalize -> render
pipeline from four triggers: initial load, date change, manual refresh and the
periodic tasks. It has no Streamlit dependency; ``streamlit_app.py`` keeps one
instance per session in ``st.session_state``.
"""

import datetime
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import quakemap.api.quake_client as quake_client
from quakemap.config import MAP_ZOOM, Settings
from quakemap.core.map_render import MarkerLayer
from quakemap.core.scheduling import PeriodicTask, RequestTicket, RequestTracker
from quakemap.core.status_bar import describe
from quakemap.models.quake import EventRecord, StatusSnapshot
from quakemap.utils.date_util import to_api_format, to_native_value
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

DayFetcher = Callable[[str], Tuple[List[EventRecord], bool]]
StatusFetcher = Callable[[], Optional[StatusSnapshot]]
LatestDateFetcher = Callable[[], Optional[datetime.date]]


class PagePhase(Enum):
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class AppState:
    """All mutable page state, owned by one PageOrchestrator."""

    selected_date: datetime.date
    phase: PagePhase = PagePhase.INITIALIZING
    markers: MarkerLayer = field(default_factory=MarkerLayer)
    records: List[EventRecord] = field(default_factory=list)
    day_ok: bool = True
    status: Optional[StatusSnapshot] = None
    zoom: float = MAP_ZOOM
    day_loaded_at: Optional[float] = None
    status_loaded_at: Optional[float] = None


class PageOrchestrator:
    """
    Drives data refresh for one dashboard session.

    Fetchers are injectable so tests can run the pipeline without a network:

    - ``day_fetcher(date_str) -> (records, ok)``
    - ``status_fetcher() -> StatusSnapshot | None``
    - ``latest_date_fetcher() -> date | None``
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        day_fetcher: Optional[DayFetcher] = None,
        status_fetcher: Optional[StatusFetcher] = None,
        latest_date_fetcher: Optional[LatestDateFetcher] = None,
        clock: Callable[[], float] = time.time,
        today: Optional[Callable[[], datetime.date]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._clock = clock
        self._today_fn = today or datetime.date.today

        s = self.settings
        self._fetch_day = day_fetcher or (
            lambda date_str: quake_client.fetch_day_checked(
                date_str, s.api_base, s.timeout, s.day_endpoint_style
            )
        )
        self._fetch_status = status_fetcher or (
            lambda: quake_client.fetch_status(s.api_base, s.timeout)
        )
        self._fetch_latest_date = latest_date_fetcher or (
            lambda: quake_client.fetch_latest_date(s.api_base, s.timeout)
        )

        self.state = AppState(selected_date=self._today_fn())
        self.requests = RequestTracker()
        self.map_task = PeriodicTask("map", s.map_refresh_seconds)
        self.status_task = PeriodicTask("status", s.status_refresh_seconds)

    # ========================================
    # Triggers
    # ========================================
    def initialize(self) -> None:
        """Pick the default day, load day data and status in parallel, enter READY."""
        self.state.phase = PagePhase.INITIALIZING
        self.state.selected_date = self._default_date()
        date_str = self.api_date
        logger.info(f"Initializing page for {date_str}")

        day_ticket = self.requests.issue("day", key=self.state.selected_date)
        status_ticket = self.requests.issue("status")
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="quakemap") as pool:
            day_future = pool.submit(self._fetch_day, date_str)
            status_future = pool.submit(self._fetch_status)
            records, ok = day_future.result()
            snapshot = status_future.result()

        now = self._clock()
        self._apply_day(day_ticket, records, ok, now)
        self._apply_status(status_ticket, snapshot, now)
        self.map_task.mark_run(now)
        self.status_task.mark_run(now)

        self.state.phase = PagePhase.READY
        logger.info("Page ready.")

    def on_date_change(self, value) -> bool:
        """
        Select a new day and reload its events.

        :param value: Widget value or free text; unparseable input means today.
        :return: bool - True when the selection changed.
        """
        new_date = to_native_value(value, today=self._today_fn())
        if new_date == self.state.selected_date:
            logger.debug(f"Date unchanged: {new_date.isoformat()}")
            return False

        self.state.selected_date = new_date
        self.load_day()
        self.map_task.mark_run(self._clock())
        return True

    def on_refresh(self) -> None:
        """Manual refresh: status always, day data only when viewing today."""
        now = self._clock()
        self.load_status()
        self.status_task.mark_run(now)
        if self.viewing_today:
            self.load_day()
            self.map_task.mark_run(now)

    def tick(self, now: Optional[float] = None) -> List[str]:
        """
        Run whichever periodic tasks are due.

        :param now: Clock reading, defaults to the orchestrator clock.
        :return: Names of the tasks that ran.
        """
        now = self._clock() if now is None else now
        ran = []
        if self.status_task.due(now):
            self.load_status()
            self.status_task.mark_run(now)
            ran.append(self.status_task.name)
        if self.map_task.due(now):
            self.load_day()
            self.map_task.mark_run(now)
            ran.append(self.map_task.name)
        return ran

    def on_zoom(self, zoom) -> bool:
        """Rescale markers for a new zoom level, no refetch."""
        if zoom is None:
            return False
        try:
            zoom_value = float(zoom)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring zoom value {zoom!r}")
            return False
        if not math.isfinite(zoom_value) or zoom_value == self.state.zoom:
            return False
        self.state.zoom = zoom_value
        self.state.markers.rescale(zoom_value)
        return True

    def pause(self) -> None:
        self.map_task.cancel()
        self.status_task.cancel()
        logger.info("Periodic refresh paused.")

    def resume(self) -> None:
        now = self._clock()
        self.map_task.resume(now)
        self.status_task.resume(now)
        logger.info("Periodic refresh resumed.")

    def shutdown(self) -> None:
        self.pause()

    # ========================================
    # Pipeline
    # ========================================
    def load_day(self) -> bool:
        """Fetch and render the selected day; False when the result was discarded."""
        ticket = self.requests.issue("day", key=self.state.selected_date)
        records, ok = self._fetch_day(to_api_format(ticket.key))
        return self._apply_day(ticket, records, ok, self._clock())

    def load_status(self) -> bool:
        """Fetch the status; False when the result was discarded."""
        ticket = self.requests.issue("status")
        snapshot = self._fetch_status()
        return self._apply_status(ticket, snapshot, self._clock())

    def _apply_day(
        self, ticket: RequestTicket, records: List[EventRecord], ok: bool, now: float
    ) -> bool:
        if not self.requests.is_current(ticket) or ticket.key != self.state.selected_date:
            logger.info(
                f"Discarding stale day result #{ticket.seq} for {to_api_format(ticket.key)}"
            )
            return False

        self.state.records = list(records)
        self.state.day_ok = ok
        drawn = self.state.markers.render(self.state.records, self.state.zoom)
        self.state.day_loaded_at = now
        logger.debug(f"Rendered {drawn} markers for {to_api_format(ticket.key)}")
        return True

    def _apply_status(
        self, ticket: RequestTicket, snapshot: Optional[StatusSnapshot], now: float
    ) -> bool:
        if not self.requests.is_current(ticket):
            logger.info(f"Discarding stale status result #{ticket.seq}")
            return False
        self.state.status = snapshot
        self.state.status_loaded_at = now
        return True

    def _default_date(self) -> datetime.date:
        if self.settings.use_latest_date:
            latest = self._fetch_latest_date()
            if latest is not None:
                return latest
            logger.warning("Latest date unavailable, defaulting to today")
        return self._today_fn()

    # ========================================
    # Views
    # ========================================
    @property
    def api_date(self) -> str:
        return to_api_format(self.state.selected_date)

    @property
    def viewing_today(self) -> bool:
        return self.state.selected_date == self._today_fn()

    def status_line(self, now: Optional[datetime.datetime] = None) -> str:
        """Current status strip text; the elapsed part is computed at call time."""
        if now is None:
            now = datetime.datetime.fromtimestamp(self._clock(), tz=datetime.timezone.utc)
        return describe(self.state.status, now=now, tz=self.settings.timezone)

    def refresh_interval_ms(self) -> int:
        """Heartbeat interval for the page autorefresh."""
        seconds = min(self.settings.status_refresh_seconds, self.settings.map_refresh_seconds)
        return int(seconds * 1000)

    def seconds_until_next_refresh(self, now: Optional[float] = None) -> Optional[float]:
        """
        Time left before the next periodic task is due.

        :param now: Clock reading, defaults to the orchestrator clock.
        :return: Seconds, or None when periodic refresh is paused.
        """
        now = self._clock() if now is None else now
        waits = [
            wait
            for wait in (
                self.status_task.seconds_until_due(now),
                self.map_task.seconds_until_due(now),
            )
            if wait is not None
        ]
        return min(waits) if waits else None
