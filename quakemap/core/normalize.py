"""normalize.py
Resolve loosely typed API payloads into the canonical record shapes.

Each entity has an ordered alias list in ``quakemap.config``; the first alias
present with a non-empty value wins. Numbers may arrive as strings (with a
decimal comma in some feeds) and the status timestamp may be epoch seconds, a
numeric string or an ISO-8601 string. Counts are whole numbers and may carry
thousands separators.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import pandas as pd
from dateutil import parser as date_parser

from quakemap.config import EVENT_FIELD_ALIASES, STATUS_FIELD_ALIASES
from quakemap.models.quake import EventRecord, StatusSnapshot
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

# Epoch values above this are milliseconds (year 33658 in seconds)
_EPOCH_MS_THRESHOLD = 1e12

# 1,234 / 1.234 / 1 234 / 12,345,678
_GROUPED_COUNT = re.compile(r"^-?\d{1,3}([.,\s])\d{3}(\1\d{3})*$")


def pick(payload: Mapping, aliases: Iterable[str]) -> Any:
    """
    Return the first non-empty value found under any of ``aliases``.

    :param payload: Raw mapping from the API.
    :param aliases: Accepted key spellings, in priority order.
    :return: The value, or None when no alias is present.
    """
    for key in aliases:
        value = payload.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def to_float(value: Any) -> float:
    """
    Coerce a loosely typed number to float, NaN when it is not a number.

    :param value: int, float, numeric string or anything else.
    :return: float
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip().replace(",", ".")
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def to_count(value: Any) -> Optional[int]:
    """
    Coerce a count to int.

    Strings may carry thousands separators (``12,000``, ``12.000``, ``12 000``);
    a separator is never read as a decimal point here.

    :param value: int, integral float or numeric string.
    :return: int, or None when it is missing, not numeric or not integral.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        logger.warning(f"Count is not a whole number: {value!r}")
        return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if _GROUPED_COUNT.match(text):
        text = re.sub(r"[.,\s]", "", text)
    try:
        return int(text)
    except ValueError:
        pass
    number = to_float(text)
    if math.isfinite(number) and number.is_integer():
        return int(number)
    logger.warning(f"Unreadable count: {value!r}")
    return None


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_last_update(value: Any) -> Optional[datetime]:
    """
    Parse the status timestamp into an aware UTC datetime.

    :param value: Epoch seconds (number or numeric string) or ISO-8601 text.
    :return: datetime in UTC, or None when the value cannot be read.
    """
    if value is None or isinstance(value, bool):
        return None

    number = to_float(value)
    if math.isfinite(number):
        if abs(number) >= _EPOCH_MS_THRESHOLD:
            number = number / 1000
        try:
            return datetime.fromtimestamp(number, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Epoch value out of range: {value!r}")
            return None

    if not isinstance(value, str):
        return None

    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError):
        logger.warning(f"Unparseable last update value: {value!r}")
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_event(payload: Mapping) -> EventRecord:
    """
    Build an EventRecord from one raw API element.

    :param payload: Raw event mapping.
    :return: EventRecord - Coordinates and magnitude are NaN when absent.
    """
    aliases = EVENT_FIELD_ALIASES
    depth = to_float(pick(payload, aliases["depth"]))
    return EventRecord(
        latitude=to_float(pick(payload, aliases["latitude"])),
        longitude=to_float(pick(payload, aliases["longitude"])),
        magnitude=to_float(pick(payload, aliases["magnitude"])),
        depth=depth if math.isfinite(depth) else None,
        date=to_text(pick(payload, aliases["date"])),
        time=to_text(pick(payload, aliases["time"])),
        location=to_text(pick(payload, aliases["location"])),
        magnitude_type=to_text(pick(payload, aliases["magnitude_type"])),
        event_id=to_text(pick(payload, aliases["event_id"])),
    )


def normalize_events(payload: Any) -> List[EventRecord]:
    """
    Normalize a day payload; anything but a list of mappings yields no records.

    :param payload: Decoded JSON body of the day query.
    :return: List of EventRecord, in payload order.
    """
    if not isinstance(payload, list):
        logger.warning(f"Day payload is {type(payload).__name__}, expected list")
        return []

    records = []
    skipped = 0
    for item in payload:
        if not isinstance(item, Mapping):
            skipped += 1
            continue
        records.append(normalize_event(item))
    if skipped:
        logger.warning(f"Skipped {skipped} non-object day entries")
    return records


def normalize_status(payload: Any) -> Optional[StatusSnapshot]:
    """
    Normalize a status payload.

    :param payload: Decoded JSON body of the status query.
    :return: StatusSnapshot (fields None when absent), or None when the payload
        is not an object at all.
    """
    if not isinstance(payload, Mapping):
        logger.warning(f"Status payload is {type(payload).__name__}, expected object")
        return None

    aliases = STATUS_FIELD_ALIASES
    return StatusSnapshot(
        last_update=parse_last_update(pick(payload, aliases["last_update"])),
        count_today=to_count(pick(payload, aliases["count_today"])),
        count_total=to_count(pick(payload, aliases["count_total"])),
    )


def records_to_dataframe(records: List[EventRecord]) -> pd.DataFrame:
    """
    Tabulate records for summaries and charts.

    :param records: Normalized records.
    :return: DataFrame with one row per record, empty with columns when none.
    """
    columns = [
        "date",
        "time",
        "location",
        "magnitude",
        "magnitude_type",
        "depth",
        "latitude",
        "longitude",
    ]
    if not records:
        return pd.DataFrame(columns=columns)
    rows: List[Dict[str, Any]] = [
        {column: getattr(record, column) for column in columns} for record in records
    ]
    df = pd.DataFrame(rows, columns=columns)
    for column in ["magnitude", "depth", "latitude", "longitude"]:
        df[column] = pd.to_numeric(df[column], errors="coerce")
    return df
