"""
Marker styling by magnitude.

Fill color is a step function over the bands in ``quakemap.config``; radius
grows linearly with magnitude, scales with the map zoom and is clamped so
markers stay visible but never swamp the map.
"""

import math
from typing import Any, List, Optional, Tuple

from quakemap.config import (
    FALLBACK_COLOR,
    MAGNITUDE_BANDS,
    MAX_RADIUS,
    MIN_RADIUS,
    RADIUS_PER_MAGNITUDE,
    REFERENCE_ZOOM,
    ZOOM_RANGE,
)
from quakemap.core.normalize import to_float


def color_for_magnitude(mag: Any) -> str:
    """
    Map a magnitude to its band color.

    :param mag: Magnitude, possibly a string, None or NaN.
    :return: Hex color; the fallback color when the magnitude is not a finite number.
    """
    value = to_float(mag)
    if not math.isfinite(value):
        return FALLBACK_COLOR

    color = MAGNITUDE_BANDS[0][1]
    for lower_bound, band_color in MAGNITUDE_BANDS:
        if value >= lower_bound:
            color = band_color
    return color


def zoom_factor(zoom: Optional[float]) -> float:
    """Scale factor for a zoom level, 1.0 at the reference zoom or when unknown."""
    if zoom is None:
        return 1.0
    zoom_value = to_float(zoom)
    if not math.isfinite(zoom_value):
        return 1.0
    low, high = ZOOM_RANGE
    zoom_value = min(high, max(low, zoom_value))
    return 2 ** ((zoom_value - REFERENCE_ZOOM) / 4)


def radius_for(mag: Any, zoom: Optional[float] = None) -> float:
    """
    Display radius in pixels for a magnitude.

    :param mag: Magnitude, possibly a string, None or NaN.
    :param zoom: Optional current map zoom.
    :return: float - Always within ``[MIN_RADIUS, MAX_RADIUS]``.
    """
    value = to_float(mag)
    if not math.isfinite(value) or value <= 0:
        return MIN_RADIUS

    radius = value * RADIUS_PER_MAGNITUDE * zoom_factor(zoom)
    return min(MAX_RADIUS, max(MIN_RADIUS, radius))


def relative_luminance(hex_color: str) -> float:
    """WCAG relative luminance of a ``#rrggbb`` color."""
    hex_value = hex_color.lstrip("#")
    channels = [int(hex_value[i : i + 2], 16) / 255 for i in (0, 2, 4)]

    def linear(c):
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (linear(c) for c in channels)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def legend_entries() -> List[Tuple[str, str]]:
    """
    Labels and colors for the magnitude legend.

    :return: List of (label, color) from the lowest band to the highest.
    """
    entries = []
    for i, (lower_bound, color) in enumerate(MAGNITUDE_BANDS):
        if i + 1 < len(MAGNITUDE_BANDS):
            upper_bound = MAGNITUDE_BANDS[i + 1][0]
            if math.isinf(lower_bound):
                label = f"< {upper_bound:g}"
            else:
                label = f"{lower_bound:g} - {upper_bound:g}"
        else:
            label = f"≥ {lower_bound:g}"
        entries.append((label, color))
    return entries
