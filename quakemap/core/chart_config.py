"""
chart_config.py

Plotly helpers for the charts under the map: standard layout and axes, and the
per-band magnitude distribution of the selected day.
"""

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from quakemap.config import MAGNITUDE_BANDS
from quakemap.core.marker_style import legend_entries


def get_default_margins(compact: bool = False) -> Dict[str, int]:
    """
    Get standard margin configurations for charts.

    :param compact: If True, returns reduced margins for sidebar-sized charts
    :return: Dictionary with margin settings
    """
    if compact:
        return dict(l=30, r=20, t=30, b=40)
    else:
        return dict(l=50, r=20, t=40, b=40)


def apply_standard_layout(
    fig: go.Figure,
    height: int = 300,
    showlegend: bool = False,
    title: Optional[str] = None,
    compact: bool = False,
) -> go.Figure:
    """
    Apply the shared chart layout.

    :param fig: Plotly figure to configure
    :param height: Chart height in pixels
    :param showlegend: Whether to show legend
    :param title: Chart title (optional)
    :param compact: Use compact margins if True
    :return: Configured figure
    """
    layout_config = {
        "height": height,
        "margin": get_default_margins(compact),
        "showlegend": showlegend,
        "template": "plotly_white",
    }
    if title:
        layout_config["title"] = title

    fig.update_layout(**layout_config)
    return fig


def apply_standard_axes(
    fig: go.Figure, xaxis_title: str = "", yaxis_title: str = ""
) -> go.Figure:
    fig.update_xaxes(title=xaxis_title, showgrid=False, type="category")
    fig.update_yaxes(
        title=yaxis_title, showgrid=True, gridcolor="lightgray", rangemode="tozero"
    )
    return fig


def magnitude_band_counts(df: pd.DataFrame) -> pd.DataFrame:
    """
    Count events per magnitude band.

    :param df: Records frame with a ``magnitude`` column
    :return: DataFrame with ``band``, ``color`` and ``count``, one row per band
        in ascending order; events without magnitude are not counted.
    """
    labels, colors = zip(*legend_entries())
    edges = [bound for bound, _ in MAGNITUDE_BANDS] + [np.inf]

    if df.empty or "magnitude" not in df.columns:
        counts = [0] * len(labels)
    else:
        binned = pd.cut(
            pd.to_numeric(df["magnitude"], errors="coerce"),
            bins=edges,
            labels=list(labels),
            right=False,
        )
        counts = binned.value_counts(sort=False).reindex(list(labels), fill_value=0)
        counts = counts.astype(int).tolist()

    return pd.DataFrame({"band": list(labels), "color": list(colors), "count": counts})


def create_magnitude_chart(df: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """
    Bar chart of event counts per magnitude band, colored like the markers.

    :param df: Records frame with a ``magnitude`` column
    :param title: Optional chart title
    :return: Plotly figure
    """
    bands = magnitude_band_counts(df)
    fig = go.Figure(
        go.Bar(
            x=bands["band"],
            y=bands["count"],
            marker_color=bands["color"],
            marker_line_color="#555555",
            marker_line_width=0.5,
            hovertemplate="Magnitud %{x}: %{y} eventos<extra></extra>",
        )
    )
    apply_standard_layout(fig, title=title, compact=True)
    apply_standard_axes(fig, xaxis_title="Magnitud", yaxis_title="Eventos")
    return fig


def summarize_magnitudes(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Headline numbers for the selected day.

    :param df: Records frame with a ``magnitude`` column
    :return: Dict with ``count``, ``max`` and ``mean``; the magnitude stats are
        None when no event carries a magnitude.
    """
    count = len(df)
    if count == 0 or "magnitude" not in df.columns:
        return {"count": count, "max": None, "mean": None}

    magnitudes = pd.to_numeric(df["magnitude"], errors="coerce").dropna()
    if magnitudes.empty:
        return {"count": count, "max": None, "mean": None}
    return {
        "count": count,
        "max": float(magnitudes.max()),
        "mean": float(magnitudes.mean()),
    }
