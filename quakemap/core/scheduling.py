"""
Periodic tasks and request sequencing for the page.

Streamlit re-runs the script on every interaction and on every autorefresh
heartbeat. ``PeriodicTask`` decides on each run whether its cadence has
elapsed; ``RequestTracker`` tags fetches so that only the newest one may
touch the display.
"""

import threading
from dataclasses import dataclass
from typing import Any, Optional


class PeriodicTask:
    """A cancellable fixed-interval task checked against a clock."""

    def __init__(self, name: str, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"{name}: interval must be positive, got {interval_seconds}")
        self.name = name
        self.interval_seconds = float(interval_seconds)
        self.last_run: Optional[float] = None
        self.active = True

    def due(self, now: float) -> bool:
        if not self.active:
            return False
        if self.last_run is None:
            return True
        return now - self.last_run >= self.interval_seconds

    def mark_run(self, now: float) -> None:
        self.last_run = now

    def seconds_until_due(self, now: float) -> Optional[float]:
        """Seconds until the next run, None when cancelled."""
        if not self.active:
            return None
        if self.last_run is None:
            return 0.0
        return max(0.0, self.last_run + self.interval_seconds - now)

    def cancel(self) -> None:
        self.active = False

    def resume(self, now: Optional[float] = None) -> None:
        """Re-arm the task; with ``now`` the next run waits a full interval."""
        self.active = True
        if now is not None:
            self.last_run = now

    def __repr__(self) -> str:
        return (
            f"PeriodicTask({self.name!r}, every={self.interval_seconds:g}s, "
            f"active={self.active}, last_run={self.last_run})"
        )


@dataclass(frozen=True)
class RequestTicket:
    """Identity of one issued fetch."""

    kind: str
    seq: int
    key: Any = None


class RequestTracker:
    """
    Latest-request-wins bookkeeping.

    Each ``issue`` hands out a ticket with a fresh sequence number for its
    kind. A ticket is current only while no newer ticket of the same kind has
    been issued.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = {}

    def issue(self, kind: str, key: Any = None) -> RequestTicket:
        with self._lock:
            seq = self._latest.get(kind, 0) + 1
            self._latest[kind] = seq
        return RequestTicket(kind=kind, seq=seq, key=key)

    def is_current(self, ticket: RequestTicket) -> bool:
        with self._lock:
            return self._latest.get(ticket.kind, 0) == ticket.seq
