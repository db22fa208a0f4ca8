"""
Map rendering for earthquake markers.

``MarkerLayer`` owns the marker set drawn on the map. It is fully replaced on
every accepted fetch; a zoom change only recomputes radii. ``build_map`` turns
the layer into a folium map for ``streamlit_folium``.
"""

import html
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import folium

from quakemap.config import MAP_CENTER, MAP_ZOOM, PLACEHOLDER, TILE_ATTRIBUTION
from quakemap.core.marker_style import color_for_magnitude, legend_entries, radius_for
from quakemap.models.quake import EventRecord, MarkerSpec
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)


def _fmt_number(value: Optional[float], digits: int = 1) -> str:
    if value is None or not math.isfinite(value):
        return PLACEHOLDER
    return f"{value:.{digits}f}"


def _fmt_text(value: str) -> str:
    return html.escape(value) if value else PLACEHOLDER


def build_popup_html(record: EventRecord) -> str:
    """
    Popup body for one event.

    :param record: Event to describe.
    :return: HTML with location, date and time, magnitude, depth and a map link.
    """
    title = html.escape(record.location) if record.location else "Terremoto"
    magnitude = _fmt_number(record.magnitude)
    if record.magnitude_type:
        magnitude = f"{magnitude} ({html.escape(record.magnitude_type)})"
    when = " ".join(part for part in (record.date, record.time) if part)
    osm_link = (
        "https://www.openstreetmap.org/"
        f"?mlat={record.latitude:.4f}&mlon={record.longitude:.4f}&zoom=12"
    )
    return (
        f"<b>{title}</b><br>"
        f"<b>Fecha:</b> {_fmt_text(when)}<br>"
        f"<b>Magnitud:</b> {magnitude}<br>"
        f"<b>Profundidad:</b> {_fmt_number(record.depth)} km<br>"
        f'<a target="_blank" href="{osm_link}">Ver en OpenStreetMap</a>'
    )


def build_tooltip(record: EventRecord) -> str:
    return f"M {_fmt_number(record.magnitude)} · {_fmt_text(record.location)}"


class MarkerLayer:
    """Ordered set of (marker, source magnitude) pairs currently drawn."""

    def __init__(self) -> None:
        self._entries: List[Tuple[MarkerSpec, float]] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def markers(self) -> List[MarkerSpec]:
        return [marker for marker, _ in self._entries]

    def clear(self) -> None:
        self._entries = []

    def render(self, records: Iterable[EventRecord], zoom: Optional[float] = None) -> int:
        """
        Replace the marker set with one marker per plottable record.

        :param records: Normalized records; non-finite coordinates are skipped.
        :param zoom: Current map zoom for radius scaling.
        :return: int - Number of markers drawn.
        """
        self.clear()
        skipped = 0
        for record in records:
            if not record.is_plottable:
                skipped += 1
                continue
            marker = MarkerSpec(
                latitude=record.latitude,
                longitude=record.longitude,
                radius=radius_for(record.magnitude, zoom),
                color=color_for_magnitude(record.magnitude),
                popup_html=build_popup_html(record),
                tooltip=build_tooltip(record),
            )
            self._entries.append((marker, record.magnitude))

        if skipped:
            logger.debug(f"Skipped {skipped} records without coordinates")
        return len(self._entries)

    def rescale(self, zoom: Optional[float]) -> None:
        """Recompute marker radii for a new zoom level."""
        for marker, magnitude in self._entries:
            marker.radius = radius_for(magnitude, zoom)


def _legend_html() -> str:
    rows = "".join(
        f'<div><span style="display:inline-block;width:12px;height:12px;'
        f'border-radius:50%;background:{color};margin-right:6px;"></span>{label}</div>'
        for label, color in legend_entries()
    )
    return (
        '<div style="position:fixed;bottom:24px;left:24px;z-index:9999;'
        "background:white;padding:6px 10px;border-radius:6px;font-size:12px;"
        'box-shadow:0 1px 4px rgba(0,0,0,0.3);">'
        f"<b>Magnitud</b>{rows}</div>"
    )


def build_map(
    layer: MarkerLayer,
    center: Sequence[float] = MAP_CENTER,
    zoom: float = MAP_ZOOM,
    legend: bool = True,
) -> folium.Map:
    """
    Build a folium map holding the layer's markers.

    :param layer: Marker set to draw.
    :param center: (lat, lon) of the initial view.
    :param zoom: Initial zoom level.
    :param legend: Whether to add the magnitude legend.
    :return: folium.Map
    """
    fmap = folium.Map(
        location=list(center),
        zoom_start=zoom,
        tiles="OpenStreetMap",
        attr=TILE_ATTRIBUTION,
        control_scale=True,
    )

    group = folium.FeatureGroup(name="Terremotos")
    for marker in layer.markers:
        folium.CircleMarker(
            location=[marker.latitude, marker.longitude],
            radius=marker.radius,
            color=marker.color,
            weight=1,
            fill=True,
            fill_color=marker.color,
            fill_opacity=0.6,
            popup=folium.Popup(marker.popup_html, max_width=280),
            tooltip=marker.tooltip,
        ).add_to(group)
    group.add_to(fmap)

    if legend:
        fmap.get_root().html.add_child(folium.Element(_legend_html()))
    return fmap
