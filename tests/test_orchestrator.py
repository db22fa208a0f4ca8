"""
Tests for page orchestration: initial load, triggers, periodic tasks and the
latest-request-wins guard.

Fetchers are fakes; no network access.
"""

import datetime
import threading

import pytest

from quakemap.config import MAX_RADIUS, MIN_RADIUS, Settings
from quakemap.core.orchestrator import PageOrchestrator, PagePhase
from quakemap.core.scheduling import PeriodicTask, RequestTracker
from quakemap.core.status_bar import STATUS_UNAVAILABLE
from quakemap.models.quake import EventRecord, StatusSnapshot

TODAY = datetime.date(2024, 2, 1)
T0 = 1_700_000_000.0


def _record(lat=28.0, lon=-16.0, mag=2.0, location="TENERIFE"):
    return EventRecord(latitude=lat, longitude=lon, magnitude=mag, location=location)


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now


class FakeApi:
    """Records the calls and serves canned data per day."""

    def __init__(self, days=None, status=None, latest=None):
        self.days = days or {}
        self.status = status
        self.latest = latest
        self.day_calls = []
        self.status_calls = 0
        self.failing_days = set()
        self.lock = threading.Lock()

    def fetch_day(self, date_str):
        with self.lock:
            self.day_calls.append(date_str)
        if date_str in self.failing_days:
            return [], False
        return list(self.days.get(date_str, [])), True

    def fetch_status(self):
        with self.lock:
            self.status_calls += 1
        return self.status

    def fetch_latest(self):
        return self.latest


@pytest.fixture
def api():
    return FakeApi(
        days={
            "01/02/2024": [_record(), _record(lat=float("nan")), _record(mag=4.2, location="EL HIERRO")],
            "31/01/2024": [_record(mag=1.0)],
        },
        status=StatusSnapshot(
            last_update=datetime.datetime.fromtimestamp(T0 - 300, tz=datetime.timezone.utc),
            count_today=3,
            count_total=12000,
        ),
    )


@pytest.fixture
def clock():
    return FakeClock()


def _orchestrator(api, clock, **settings):
    return PageOrchestrator(
        Settings(**settings),
        day_fetcher=api.fetch_day,
        status_fetcher=api.fetch_status,
        latest_date_fetcher=api.fetch_latest,
        clock=clock,
        today=lambda: TODAY,
    )


class TestInitialize:
    """Test the initial load."""

    def test_loads_today_and_status(self, api, clock):
        orch = _orchestrator(api, clock)
        assert orch.state.phase is PagePhase.INITIALIZING

        orch.initialize()

        assert orch.state.phase is PagePhase.READY
        assert orch.state.selected_date == TODAY
        assert api.day_calls == ["01/02/2024"]
        assert api.status_calls == 1
        assert len(orch.state.records) == 3
        assert len(orch.state.markers) == 2
        assert orch.state.status.count_total == 12000

    def test_status_line_after_init(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        line = orch.status_line()

        assert "Hoy: 3" in line
        assert "Total: 12000" in line
        assert "hace 5 min" in line

    def test_uses_latest_date_when_enabled(self, api, clock):
        api.latest = datetime.date(2024, 1, 31)
        orch = _orchestrator(api, clock, use_latest_date=True)

        orch.initialize()

        assert orch.state.selected_date == datetime.date(2024, 1, 31)
        assert api.day_calls == ["31/01/2024"]

    def test_latest_date_unavailable_falls_back_to_today(self, api, clock):
        orch = _orchestrator(api, clock, use_latest_date=True)
        orch.initialize()
        assert orch.state.selected_date == TODAY

    def test_failures_leave_valid_state(self, api, clock):
        api.failing_days.add("01/02/2024")
        api.status = None
        orch = _orchestrator(api, clock)

        orch.initialize()

        assert orch.state.phase is PagePhase.READY
        assert orch.state.day_ok is False
        assert len(orch.state.markers) == 0
        assert orch.status_line() == STATUS_UNAVAILABLE


class TestTriggers:
    """Test date change, manual refresh and zoom."""

    def test_date_change_reloads(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        changed = orch.on_date_change(datetime.date(2024, 1, 31))

        assert changed is True
        assert api.day_calls[-1] == "31/01/2024"
        assert len(orch.state.markers) == 1
        assert orch.api_date == "31/01/2024"

    def test_date_change_accepts_text(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        orch.on_date_change("31/01/2024")
        assert orch.state.selected_date == datetime.date(2024, 1, 31)

    def test_same_date_does_not_refetch(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        assert orch.on_date_change("2024-02-01") is False
        assert api.day_calls == ["01/02/2024"]

    def test_bad_text_falls_back_to_today(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        orch.on_date_change("31/01/2024")

        orch.on_date_change("not a date")

        assert orch.state.selected_date == TODAY
        assert api.day_calls[-1] == "01/02/2024"

    def test_empty_day_clears_markers(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        orch.on_date_change("01/01/2099")

        assert api.day_calls[-1] == "01/01/2099"
        assert orch.state.records == []
        assert len(orch.state.markers) == 0
        assert orch.state.day_ok is True

    def test_refresh_today_reloads_both(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        orch.on_refresh()

        assert api.status_calls == 2
        assert api.day_calls == ["01/02/2024", "01/02/2024"]

    def test_refresh_past_day_reloads_status_only(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        orch.on_date_change("31/01/2024")
        calls = len(api.day_calls)

        orch.on_refresh()

        assert api.status_calls == 2
        assert len(api.day_calls) == calls

    def test_zoom_rescales_without_fetch(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        before = [m.radius for m in orch.state.markers.markers]

        assert orch.on_zoom(11) is True

        after = [m.radius for m in orch.state.markers.markers]
        assert after != before
        assert api.day_calls == ["01/02/2024"]

    @pytest.mark.parametrize("zoom", [None, "abc", float("nan"), 7])
    def test_zoom_ignored(self, api, clock, zoom):
        orch = _orchestrator(api, clock)
        orch.initialize()
        assert orch.on_zoom(zoom) is False

    def test_extreme_zoom_keeps_radii_in_bounds(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        assert orch.on_zoom(5000) is True

        assert all(MIN_RADIUS <= m.radius <= MAX_RADIUS for m in orch.state.markers.markers)


class TestPeriodicTasks:
    """Test tick scheduling, pause and resume."""

    def test_nothing_due_right_after_init(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        assert orch.tick(T0 + 1) == []

    def test_status_runs_on_its_own_cadence(self, api, clock):
        orch = _orchestrator(api, clock, status_refresh_seconds=60, map_refresh_seconds=900)
        orch.initialize()

        assert orch.tick(T0 + 61) == ["status"]
        assert orch.tick(T0 + 122) == ["status"]
        assert orch.tick(T0 + 901) == ["status", "map"]
        assert api.day_calls == ["01/02/2024", "01/02/2024"]

    def test_map_refresh_uses_selected_date(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        orch.on_date_change("31/01/2024")

        orch.tick(T0 + 15 * 60)

        assert api.day_calls[-1] == "31/01/2024"

    def test_pause_and_resume(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        orch.pause()
        assert orch.tick(T0 + 10_000) == []

        clock.now = T0 + 10_000
        orch.resume()
        assert orch.tick(T0 + 10_001) == []
        assert orch.tick(T0 + 10_000 + 60) == ["status"]

    def test_shutdown_stops_periodic_tasks(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()
        orch.shutdown()
        assert orch.tick(T0 + 10_000) == []
        assert api.status_calls == 1

    def test_refresh_interval(self, api, clock):
        orch = _orchestrator(api, clock, status_refresh_seconds=45, map_refresh_seconds=600)
        assert orch.refresh_interval_ms() == 45_000

    def test_seconds_until_next_refresh(self, api, clock):
        orch = _orchestrator(api, clock, status_refresh_seconds=60, map_refresh_seconds=900)
        orch.initialize()

        assert orch.seconds_until_next_refresh(T0 + 20) == 40
        orch.tick(T0 + 60)
        assert orch.seconds_until_next_refresh(T0 + 70) == 50

        orch.pause()
        assert orch.seconds_until_next_refresh(T0 + 70) is None


class TestLatestRequestWins:
    """A result for a superseded request must not reach the display."""

    def test_slow_old_date_does_not_overwrite_new_one(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        real_fetch = api.fetch_day
        state = {"raced": False}

        def racing_fetch(date_str):
            # While the 31/01 request is in flight the user picks 01/02 again
            if date_str == "31/01/2024" and not state["raced"]:
                state["raced"] = True
                orch.on_date_change(TODAY)
            return real_fetch(date_str)

        orch._fetch_day = racing_fetch
        orch.on_date_change("31/01/2024")

        assert orch.state.selected_date == TODAY
        assert len(orch.state.markers) == 2
        assert [r.location for r in orch.state.records][-1] == "EL HIERRO"

    def test_stale_status_is_discarded(self, api, clock):
        orch = _orchestrator(api, clock)
        orch.initialize()

        newer = StatusSnapshot(count_today=9, count_total=12006)
        older = StatusSnapshot(count_today=1, count_total=1)
        state = {"raced": False}

        def racing_status():
            if not state["raced"]:
                state["raced"] = True
                api.status = newer
                orch.load_status()
                return older
            return api.status

        orch._fetch_status = racing_status
        accepted = orch.load_status()

        assert accepted is False
        assert orch.state.status == newer


class TestScheduling:
    """Test the scheduling primitives directly."""

    def test_periodic_task(self):
        task = PeriodicTask("map", 900)
        assert task.due(0)
        task.mark_run(0)
        assert not task.due(899)
        assert task.due(900)
        assert task.seconds_until_due(300) == 600

        task.cancel()
        assert not task.due(10_000)
        assert task.seconds_until_due(10_000) is None

    def test_periodic_task_rejects_bad_interval(self):
        with pytest.raises(ValueError):
            PeriodicTask("map", 0)

    def test_request_tracker(self):
        tracker = RequestTracker()
        first = tracker.issue("day", key="a")
        assert tracker.is_current(first)

        second = tracker.issue("day", key="b")
        assert not tracker.is_current(first)
        assert tracker.is_current(second)

        status = tracker.issue("status")
        assert tracker.is_current(second)
        assert tracker.is_current(status)
        assert (status.seq, second.seq) == (1, 2)
