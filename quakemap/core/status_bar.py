"""
Status strip text.

Turns a normalized StatusSnapshot into the single line shown above the map.
Missing fields show the placeholder; a failed status fetch gets its own line
so stale numbers are never shown silently.
"""

from datetime import datetime, timezone
from typing import Optional

import pytz

from quakemap.config import DISPLAY_TIMEZONE, PLACEHOLDER
from quakemap.models.quake import StatusSnapshot

STATUS_UNAVAILABLE = "Estado no disponible: no se pudo contactar con el servidor"
SEPARATOR = " · "


def format_elapsed(seconds: Optional[float]) -> str:
    """
    Human elapsed time: seconds under a minute, minutes under an hour, else hours.

    :param seconds: Elapsed seconds; negative values (clock skew) count as zero.
    :return: e.g. ``"42 s"``, ``"5 min"``, ``"3 h"``; the placeholder when unknown.
    """
    if seconds is None:
        return PLACEHOLDER
    seconds = max(0.0, seconds)
    if seconds < 60:
        return f"{int(seconds)} s"
    elif seconds < 3600:
        return f"{int(seconds // 60)} min"
    else:
        return f"{int(seconds // 3600)} h"


def format_timestamp(moment: Optional[datetime], tz: str = DISPLAY_TIMEZONE) -> str:
    """Format an aware datetime in the display timezone as ``DD/MM/YYYY HH:MM:SS``."""
    if moment is None:
        return PLACEHOLDER
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(pytz.timezone(tz)).strftime("%d/%m/%Y %H:%M:%S")


def _fmt_count(count: Optional[int]) -> str:
    return PLACEHOLDER if count is None else str(count)


def describe(
    snapshot: Optional[StatusSnapshot],
    now: Optional[datetime] = None,
    tz: str = DISPLAY_TIMEZONE,
) -> str:
    """
    Render the status line.

    :param snapshot: Normalized status, or None when the fetch failed.
    :param now: Reference instant for the elapsed time, defaults to the current time.
    :param tz: Display timezone name.
    :return: str - One line of text.
    """
    if snapshot is None:
        return STATUS_UNAVAILABLE

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    elapsed = None
    if snapshot.last_update is not None:
        elapsed = (now - snapshot.last_update).total_seconds()

    updated = format_timestamp(snapshot.last_update, tz)
    if elapsed is not None:
        updated = f"{updated} (hace {format_elapsed(elapsed)})"

    parts = [
        f"Última actualización: {updated}",
        f"Hoy: {_fmt_count(snapshot.count_today)}",
        f"Total: {_fmt_count(snapshot.count_total)}",
    ]
    return SEPARATOR.join(parts)
