# config.py
"""
Configurations for the quakemap earthquake dashboard.

This module holds the API defaults, map view, refresh cadences, marker style
bands and the field alias tables used to normalize the loosely typed API
payloads. ``load_settings`` resolves the runtime settings from environment
variables, Streamlit secrets and these defaults, in that order.
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

# API
DEFAULT_API_BASE = "https://api.quakes.earth"
DEFAULT_TIMEOUT_SECONDS = 15.0
DAY_ENDPOINT_STYLES = ("query", "path")

# Map view (Canary Islands)
MAP_CENTER = (28.3, -16.6)
MAP_ZOOM = 7
MAP_HEIGHT = 560
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/">OpenStreetMap</a> contributors'
)

# Refresh cadences
MAP_REFRESH_SECONDS = 15 * 60
STATUS_REFRESH_SECONDS = 60

# Display
DISPLAY_TIMEZONE = "Atlantic/Canary"
PLACEHOLDER = "--"

# Marker style: (lower magnitude bound, fill color), ascending, light to dark
MAGNITUDE_BANDS = [
    (float("-inf"), "#ffffb2"),
    (1.0, "#fecc5c"),
    (2.0, "#fd8d3c"),
    (3.0, "#f03b20"),
    (4.0, "#bd0026"),
]
FALLBACK_COLOR = "#9e9e9e"
RADIUS_PER_MAGNITUDE = 3.5
MIN_RADIUS = 4.0
MAX_RADIUS = 30.0
REFERENCE_ZOOM = MAP_ZOOM
# Leaflet tile zoom levels
ZOOM_RANGE = (0.0, 24.0)

# Accepted field spellings, first match wins
EVENT_FIELD_ALIASES = {
    "latitude": ["lat", "latitude", "latitud"],
    "longitude": ["lon", "lng", "long", "longitude", "longitud"],
    "magnitude": ["mag", "magnitude", "magnitud"],
    "depth": ["depth", "depth_km", "profundidad", "prof"],
    "date": ["fecha", "date", "dia"],
    "time": ["hora", "time", "hour"],
    "location": ["title", "location", "localizacion", "place", "region", "zona"],
    "magnitude_type": ["tipo_mag", "mag_type", "magType", "magnitude_type"],
    "event_id": ["id", "event_id", "evid", "evento"],
}

STATUS_FIELD_ALIASES = {
    "last_update": [
        "last_update",
        "lastUpdate",
        "last_updated",
        "updated_at",
        "updatedAt",
        "ultima_actualizacion",
        "timestamp",
    ],
    "count_today": ["today", "count_today", "today_count", "hoy", "events_today"],
    "count_total": ["total", "count_total", "total_count", "total_events"],
}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for one dashboard session."""

    api_base: str = DEFAULT_API_BASE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    day_endpoint_style: str = "query"
    map_refresh_seconds: int = MAP_REFRESH_SECONDS
    status_refresh_seconds: int = STATUS_REFRESH_SECONDS
    use_latest_date: bool = False
    timezone: str = DISPLAY_TIMEZONE


def _secret(name: str) -> Optional[Any]:
    try:
        return st.secrets.get(name)
    except (FileNotFoundError, StreamlitAPIException):
        logger.debug(f"No Streamlit secrets available for {name}")
        return None


def get_setting(name: str, default: Any = None, use_secrets: bool = True) -> Any:
    """
    Resolve one setting from the environment, then Streamlit secrets.

    :param name: Setting name, e.g. ``QUAKEMAP_API_BASE``.
    :param default: Value used when neither source defines the setting.
    :param use_secrets: Whether to consult ``st.secrets``.
    :return: The raw setting value.
    """
    value = os.getenv(name)
    if value is not None:
        return value
    if use_secrets:
        value = _secret(name)
        if value is not None:
            return value
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def load_settings(use_secrets: bool = True) -> Settings:
    """
    Build the settings object for the dashboard.

    :param use_secrets: Whether Streamlit secrets may supply values.
    :return: Settings - Frozen settings.
    :raises ValueError: If the day endpoint style is not recognised or a
        numeric setting cannot be parsed.
    """
    style = str(
        get_setting("QUAKEMAP_DAY_ENDPOINT_STYLE", "query", use_secrets)
    ).lower()
    if style not in DAY_ENDPOINT_STYLES:
        raise ValueError(
            f"Unknown day endpoint style {style!r}, expected one of {DAY_ENDPOINT_STYLES}"
        )

    settings = Settings(
        api_base=str(
            get_setting("QUAKEMAP_API_BASE", DEFAULT_API_BASE, use_secrets)
        ).rstrip("/"),
        timeout=float(
            get_setting("QUAKEMAP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS, use_secrets)
        ),
        day_endpoint_style=style,
        map_refresh_seconds=int(
            get_setting("QUAKEMAP_MAP_REFRESH_SECONDS", MAP_REFRESH_SECONDS, use_secrets)
        ),
        status_refresh_seconds=int(
            get_setting(
                "QUAKEMAP_STATUS_REFRESH_SECONDS", STATUS_REFRESH_SECONDS, use_secrets
            )
        ),
        use_latest_date=_as_bool(
            get_setting("QUAKEMAP_USE_LATEST_DATE", False, use_secrets)
        ),
        timezone=str(get_setting("QUAKEMAP_TIMEZONE", DISPLAY_TIMEZONE, use_secrets)),
    )
    logger.debug(f"Loaded settings: {settings}")
    return settings
