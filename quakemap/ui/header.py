"""
Header rendering module for the earthquake dashboard.

Title, status strip and selected-date label.
"""

import streamlit as st

from quakemap.core.orchestrator import PageOrchestrator
from quakemap.core.status_bar import STATUS_UNAVAILABLE
from quakemap.core.styles import get_style_manager
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)


def render_header(orchestrator: PageOrchestrator) -> None:
    """
    Render the page title with the status strip beside it.

    :param orchestrator: Session orchestrator
    """
    style_manager = get_style_manager()
    style_manager.inject_styles()

    header_col1, header_col2 = st.columns([1, 2])
    with header_col1:
        st.header("Terremotos")
        style_manager.render_date_label(orchestrator.api_date)
    with header_col2:
        render_status_strip(orchestrator)


def render_status_strip(orchestrator: PageOrchestrator) -> None:
    """Render the freshness/count line, or the error variant when status is unavailable."""
    style_manager = get_style_manager()
    try:
        line = orchestrator.status_line()
        style_manager.render_status_strip(line, ok=orchestrator.state.status is not None)
    except Exception as e:
        logger.error(f"Error rendering status strip: {e}")
        style_manager.render_status_strip(STATUS_UNAVAILABLE, ok=False)
