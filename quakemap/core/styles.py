"""
Centralized style management for the dashboard's status strip.

Provides the CSS and the small HTML builders used by the header: the status
strip (normal and error variants) and the selected-date label.
"""

import html
from dataclasses import dataclass
from typing import Optional

import streamlit as st

from quakemap.utils.log_util import app_logger

logger = app_logger(__name__)


@dataclass
class StyleConfig:
    """Configuration dataclass for style parameters."""

    strip_font_size: str = "0.9rem"
    strip_line_height: str = "1.3"

    # Colors
    text_color: str = "#262730"
    strip_bg: str = "#f8f9fa"
    strip_border: str = "#e9ecef"
    error_bg: str = "#fdecea"
    error_border: str = "#f5c2c7"
    date_label_color: str = "#555555"

    mobile_breakpoint: str = "768px"


class StyleManager:
    """
    Centralized style management with singleton pattern.

    Usage:
        style_manager = get_style_manager()
        style_manager.inject_styles()  # once per rerun
        style_manager.render_status_strip(text, ok=True)

    CSS Classes:
        - .status-strip: Container for the freshness/count line
        - .status-strip.status-error: Variant shown when the status is unavailable
        - .date-label: Selected-date caption
    """

    _instance: Optional["StyleManager"] = None

    def __new__(cls) -> "StyleManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, "_config"):
            self._config = StyleConfig()

    @property
    def config(self) -> StyleConfig:
        return self._config

    def inject_styles(self) -> None:
        """Inject global CSS styles; Streamlit drops them on every rerun."""
        css = self._generate_css()
        st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)
        logger.debug("CSS styles injected/reinjected")

    def _generate_css(self) -> str:
        return f"""
        .status-strip {{
            font-size: {self.config.strip_font_size};
            line-height: {self.config.strip_line_height};
            color: {self.config.text_color};
            background-color: {self.config.strip_bg};
            border: 1px solid {self.config.strip_border};
            border-radius: 6px;
            padding: 0.5rem 0.75rem;
            margin: 0.5rem 0;
        }}

        .status-strip.status-error {{
            background-color: {self.config.error_bg};
            border-color: {self.config.error_border};
            font-weight: 500;
        }}

        .date-label {{
            color: {self.config.date_label_color};
            font-size: 0.85rem;
            margin: 0.25rem 0;
        }}

        @media (max-width: {self.config.mobile_breakpoint}) {{
            .status-strip {{
                font-size: 0.75rem;
                padding: 0.4rem 0.6rem;
            }}
        }}
        """

    def build_status_strip(self, text: str, ok: bool = True) -> str:
        """
        Build HTML for the status strip.

        :param text: Status line, plain text
        :param ok: False renders the error variant
        :return: HTML string
        """
        css_class = "status-strip" if ok else "status-strip status-error"
        return f'<div class="{css_class}">{html.escape(text)}</div>'

    def render_status_strip(self, text: str, ok: bool = True) -> None:
        st.markdown(self.build_status_strip(text, ok), unsafe_allow_html=True)

    def render_date_label(self, api_date: str) -> None:
        st.markdown(
            f'<div class="date-label">Fecha seleccionada: {html.escape(api_date)}</div>',
            unsafe_allow_html=True,
        )


def get_style_manager() -> StyleManager:
    """
    Get the singleton StyleManager instance.

    :return: StyleManager instance
    """
    return StyleManager()
