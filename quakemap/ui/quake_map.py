"""
Map tab: folium map of the selected day plus summary metrics and the
magnitude distribution chart.
"""

import streamlit as st
from streamlit_folium import st_folium

from quakemap.config import MAP_CENTER, MAP_HEIGHT
from quakemap.core.chart_config import create_magnitude_chart, summarize_magnitudes
from quakemap.core.map_render import build_map
from quakemap.core.normalize import records_to_dataframe
from quakemap.core.orchestrator import PageOrchestrator
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

MAP_KEY = "quake_map"


def render(orchestrator: PageOrchestrator) -> None:
    """
    Render the map, then feed its reported zoom back to the orchestrator.

    :param orchestrator: Session orchestrator
    """
    state = orchestrator.state

    if not state.day_ok:
        st.warning(f"No se pudieron cargar los datos del {orchestrator.api_date}.")
    elif not state.records:
        st.info(f"Sin terremotos registrados el {orchestrator.api_date}.")

    left, right = st.columns([3, 1])

    with left:
        fmap = build_map(state.markers, center=MAP_CENTER, zoom=state.zoom)
        map_output = st_folium(
            fmap,
            key=MAP_KEY,
            height=MAP_HEIGHT,
            use_container_width=True,
            returned_objects=["zoom"],
        )
        if map_output and orchestrator.on_zoom(map_output.get("zoom")):
            logger.debug(f"Markers rescaled for zoom {state.zoom}")

    with right:
        render_summary(orchestrator)


def render_summary(orchestrator: PageOrchestrator) -> None:
    """Event count, magnitude stats and per-band chart for the selected day."""
    try:
        df = records_to_dataframe(orchestrator.state.records)
        summary = summarize_magnitudes(df)

        st.subheader("Resumen")
        st.metric("Eventos", summary["count"])
        if summary["max"] is not None:
            st.metric("Magnitud máxima", f"{summary['max']:.1f}")
            st.metric("Magnitud media", f"{summary['mean']:.2f}")

        st.plotly_chart(create_magnitude_chart(df), use_container_width=True)

        if not df.empty:
            with st.expander("Listado de eventos", expanded=False):
                st.dataframe(
                    df.drop(columns=["latitude", "longitude"]),
                    hide_index=True,
                    use_container_width=True,
                )
    except Exception as e:
        logger.error(f"Error rendering summary: {e}")
        st.caption("Resumen no disponible")
