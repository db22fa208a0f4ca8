"""
Main streamlit.io application: daily earthquake map.
"""

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from quakemap.config import load_settings
from quakemap.core.orchestrator import PageOrchestrator, PagePhase
from quakemap.ui import components, header, quake_map
from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)

st.set_page_config(
    page_title="Mapa de terremotos",
    layout="wide",
    initial_sidebar_state="collapsed",
)


# Setup and get data ########################

if "orchestrator" not in st.session_state:
    settings = load_settings()
    orchestrator = PageOrchestrator(settings)
    with st.spinner("Cargando terremotos..."):
        orchestrator.initialize()
    st.session_state["orchestrator"] = orchestrator
    logger.debug(f"New session for {settings.api_base}")
else:
    orchestrator = st.session_state["orchestrator"]

auto_update = components.render_refresh_controls(orchestrator)

# Heartbeat rerun; the periodic tasks decide what is actually due
if auto_update and orchestrator.state.phase is PagePhase.READY:
    st_autorefresh(interval=orchestrator.refresh_interval_ms(), key="quake_autorefresh")
    ran = orchestrator.tick()
    if ran:
        logger.debug(f"Periodic tasks ran: {ran}")


# Present the dashboard ########################

header.render_header(orchestrator)
components.render_date_picker(orchestrator)
quake_map.render(orchestrator)
