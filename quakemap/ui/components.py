"""
Reusable UI controls for the earthquake dashboard.

The date picker (calendar plus free text) and the refresh controls. Widget
callbacks forward to the session's PageOrchestrator; they run before the
widgets are drawn, so they may also resync the other widget's value.
"""

import streamlit as st

from quakemap.core.orchestrator import PageOrchestrator
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

DATE_PICKER_KEY = "date_picker"
DATE_TEXT_KEY = "date_text"
AUTO_UPDATE_KEY = "auto_update"


def _on_calendar_change(orchestrator: PageOrchestrator) -> None:
    orchestrator.on_date_change(st.session_state[DATE_PICKER_KEY])


def _on_text_change(orchestrator: PageOrchestrator) -> None:
    text = st.session_state.get(DATE_TEXT_KEY, "")
    if not text.strip():
        return
    orchestrator.on_date_change(text)
    # Keep the calendar in sync with what was typed (or the fallback day)
    st.session_state[DATE_PICKER_KEY] = orchestrator.state.selected_date
    st.session_state[DATE_TEXT_KEY] = ""


def render_date_picker(orchestrator: PageOrchestrator) -> None:
    """
    Calendar widget plus a free-text field, both feeding ``on_date_change``.

    :param orchestrator: Session orchestrator
    """
    if DATE_PICKER_KEY not in st.session_state:
        st.session_state[DATE_PICKER_KEY] = orchestrator.state.selected_date

    col1, col2 = st.columns([1, 1])
    with col1:
        st.date_input(
            "Fecha",
            key=DATE_PICKER_KEY,
            format="DD/MM/YYYY",
            on_change=_on_calendar_change,
            args=(orchestrator,),
        )
    with col2:
        st.text_input(
            "o escribe una fecha",
            key=DATE_TEXT_KEY,
            placeholder="DD/MM/YYYY",
            on_change=_on_text_change,
            args=(orchestrator,),
        )


def _on_auto_update_change(orchestrator: PageOrchestrator) -> None:
    if st.session_state[AUTO_UPDATE_KEY]:
        orchestrator.resume()
    else:
        orchestrator.pause()


def render_refresh_controls(orchestrator: PageOrchestrator) -> bool:
    """
    Sidebar auto-update toggle and manual refresh button.

    :param orchestrator: Session orchestrator
    :return: bool - Whether auto-update is on.
    """
    auto_update = st.sidebar.checkbox(
        "Actualización automática",
        value=True,
        key=AUTO_UPDATE_KEY,
        on_change=_on_auto_update_change,
        args=(orchestrator,),
    )

    if st.sidebar.button("🔄 Actualizar"):
        try:
            orchestrator.on_refresh()
            st.sidebar.success("Datos actualizados")
        except Exception as e:
            logger.error(f"Manual refresh failed: {e}")
            st.sidebar.error("No se pudieron actualizar los datos")

    settings = orchestrator.settings
    st.sidebar.caption(
        f"Mapa cada {settings.map_refresh_seconds // 60} min · "
        f"estado cada {settings.status_refresh_seconds} s"
    )
    remaining = orchestrator.seconds_until_next_refresh()
    if auto_update and remaining is not None:
        st.sidebar.caption(f"Próxima actualización en {int(remaining)} s")
    return auto_update
