"""
quake_client.py: Lightweight interface to the earthquake API using direct requests.

Every call is best effort: transport errors, non-200 responses and malformed
bodies are logged and turned into an empty result, never raised to the page.

Functions:
- fetch_day(date_str, api_base)
- fetch_day_checked(date_str, api_base)
- fetch_status(api_base)
- fetch_latest_date(api_base)
"""

import datetime
from pprint import pprint
from typing import Any, List, Optional, Tuple

import requests

from quakemap.config import DEFAULT_API_BASE, DEFAULT_TIMEOUT_SECONDS
from quakemap.core.normalize import normalize_events, normalize_status
from quakemap.models.quake import EventRecord, StatusSnapshot
from quakemap.utils.date_util import from_api_format
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)


class FetchFailed(Exception):
    """A request failed in transport, status or decoding."""


def _get_json(url: str, params: Optional[dict] = None, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> Any:
    """
    GET a URL and decode its JSON body.

    :param url: Absolute URL.
    :param params: Optional query parameters.
    :param timeout: Request timeout in seconds.
    :return: Decoded JSON body.
    :raises FetchFailed: On transport error, non-200 status or non-JSON body.
    """
    try:
        resp = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise FetchFailed(f"Request error for {url}: {e}") from e

    if resp.status_code != 200:
        raise FetchFailed(f"{url} answered {resp.status_code}: {resp.text[:200]}")

    try:
        return resp.json()
    except ValueError as e:
        raise FetchFailed(f"{url} did not return JSON: {e}") from e


def day_url(date_str: str, api_base: str = DEFAULT_API_BASE, style: str = "query") -> Tuple[str, Optional[dict]]:
    """
    Build the day query URL and parameters.

    :param date_str: Day as ``DD/MM/YYYY``.
    :param api_base: API base URL.
    :param style: ``query`` for ``/day?date=...``, ``path`` for the older ``/day/DD/MM/YYYY``.
    :return: Tuple of (url, params).
    """
    base = api_base.rstrip("/")
    if style == "path":
        return f"{base}/day/{date_str}", None
    return f"{base}/day", {"date": date_str}


def fetch_day_checked(
    date_str: str,
    api_base: str = DEFAULT_API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    style: str = "query",
) -> Tuple[List[EventRecord], bool]:
    """
    Fetch and normalize all events of one day, reporting whether the call worked.

    :param date_str: Day as ``DD/MM/YYYY``.
    :param api_base: API base URL.
    :param timeout: Request timeout in seconds.
    :param style: Day endpoint style, see ``day_url``.
    :return: Tuple of (records, ok). ``ok`` is False on transport or payload failure.
    """
    url, params = day_url(date_str, api_base, style)
    logger.info(f"Fetching day: {date_str}")
    try:
        payload = _get_json(url, params=params, timeout=timeout)
    except FetchFailed as e:
        logger.error(f"Day fetch failed for {date_str}: {e}")
        return [], False

    if not isinstance(payload, list):
        logger.error(f"Day fetch for {date_str} returned {type(payload).__name__}, expected list")
        return [], False

    records = normalize_events(payload)
    logger.info(f"Loaded {len(records)} earthquakes for {date_str}")
    return records, True


def fetch_day(
    date_str: str,
    api_base: str = DEFAULT_API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    style: str = "query",
) -> List[EventRecord]:
    """
    Fetch and normalize all events of one day.

    :param date_str: Day as ``DD/MM/YYYY``.
    :param api_base: API base URL.
    :param timeout: Request timeout in seconds.
    :param style: Day endpoint style, see ``day_url``.
    :return: List of EventRecord, empty on failure.
    """
    records, _ = fetch_day_checked(date_str, api_base, timeout, style)
    return records


def fetch_status(
    api_base: str = DEFAULT_API_BASE, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> Optional[StatusSnapshot]:
    """
    Fetch the dataset status.

    :param api_base: API base URL.
    :param timeout: Request timeout in seconds.
    :return: StatusSnapshot, or None when the status is unavailable.
    """
    url = f"{api_base.rstrip('/')}/status"
    try:
        payload = _get_json(url, timeout=timeout)
    except FetchFailed as e:
        logger.error(f"Status fetch failed: {e}")
        return None
    return normalize_status(payload)


def fetch_latest_date(
    api_base: str = DEFAULT_API_BASE, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> Optional[datetime.date]:
    """
    Ask the API for the most recent day that has data.

    :param api_base: API base URL.
    :param timeout: Request timeout in seconds.
    :return: datetime.date, or None when unavailable.
    """
    url = f"{api_base.rstrip('/')}/latest-date"
    try:
        payload = _get_json(url, timeout=timeout)
    except FetchFailed as e:
        logger.error(f"Latest date fetch failed: {e}")
        return None

    if not isinstance(payload, dict):
        logger.warning(f"Latest date payload is {type(payload).__name__}, expected object")
        return None
    return from_api_format(payload.get("latest"))


def main():
    status = fetch_status()
    print("Status:")
    pprint(status)

    latest = fetch_latest_date()
    if latest is None:
        print("No latest date reported.")
        return

    date_str = latest.strftime("%d/%m/%Y")
    records = fetch_day(date_str)
    print(f"\n{len(records)} events on {date_str}")
    if records:
        pprint(records[0])


if __name__ == "__main__":
    main()
