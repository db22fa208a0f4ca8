"""
Date helpers for the day selector.

The API wants ``DD/MM/YYYY``; the Streamlit date widget wants a
``datetime.date``; browsers use ``YYYY-MM-DD``. Every conversion here falls
back to today instead of raising, so a bad input never stalls a refresh.
"""

import datetime
from typing import Optional

import pandas as pd
from dateutil import parser

from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

API_DATE_FORMAT = "%d/%m/%Y"
ISO_DATE_FORMAT = "%Y-%m-%d"
STRICT_FORMATS = (ISO_DATE_FORMAT, API_DATE_FORMAT, "%d-%m-%Y", "%d.%m.%Y")


def to_date(value) -> datetime.date:
    """
    Convert a date-like value to a ``datetime.date``.

    :param value: date, datetime, pandas Timestamp or date string.
    :return: datetime.date - Parsed day.
    :raises ValueError: If the value cannot be read as a day.
    """
    if value is pd.NaT:
        raise ValueError("NaT is not a date")
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("Empty date string")

    for fmt in STRICT_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Unparseable date {text!r}") from e


def _today(today: Optional[datetime.date]) -> datetime.date:
    return today if today is not None else datetime.date.today()


def to_native_value(value, today: Optional[datetime.date] = None) -> datetime.date:
    """
    Normalize any date-like input to the value ``st.date_input`` accepts.

    :param value: Widget value, API string or free text.
    :param today: Day used as fallback, defaults to the local current day.
    :return: datetime.date
    """
    try:
        return to_date(value)
    except ValueError as e:
        fallback = _today(today)
        logger.warning(f"Invalid date input ({e}), using {fallback.isoformat()}")
        return fallback


def to_api_format(value, today: Optional[datetime.date] = None) -> str:
    """
    Format a date-like input as the API's ``DD/MM/YYYY``.

    :param value: Widget value, ISO string, API string or free text.
    :param today: Day used as fallback, defaults to the local current day.
    :return: str - Zero-padded ``DD/MM/YYYY``.
    """
    day = to_native_value(value, today=today)
    return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"


def to_iso_value(value, today: Optional[datetime.date] = None) -> str:
    """Format a date-like input as the browser-native ``YYYY-MM-DD``."""
    day = to_native_value(value, today=today)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def from_api_format(text: Optional[str]) -> Optional[datetime.date]:
    """
    Strictly parse an API ``DD/MM/YYYY`` string.

    :param text: API date string.
    :return: datetime.date or None when the string does not match.
    """
    if not isinstance(text, str):
        return None
    try:
        return datetime.datetime.strptime(text.strip(), API_DATE_FORMAT).date()
    except ValueError:
        logger.debug(f"Not an API date: {text!r}")
        return None
