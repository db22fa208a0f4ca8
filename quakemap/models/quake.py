"""
Earthquake data models and type definitions.

This module provides the canonical record shapes used once payloads have
crossed the API boundary. Downstream code never sees raw API keys.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class EventRecord:
    """One earthquake observation."""

    latitude: float
    longitude: float
    magnitude: float
    depth: Optional[float] = None
    date: str = ""
    time: str = ""
    location: str = ""
    magnitude_type: str = ""
    event_id: str = ""

    @property
    def is_plottable(self) -> bool:
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)


@dataclass
class StatusSnapshot:
    """Dataset freshness and count metadata."""

    last_update: Optional[datetime] = None
    count_today: Optional[int] = None
    count_total: Optional[int] = None


@dataclass
class MarkerSpec:
    """Everything needed to draw one circle marker."""

    latitude: float
    longitude: float
    radius: float
    color: str
    popup_html: str
    tooltip: str = ""
