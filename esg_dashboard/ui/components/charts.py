"""
Plotly figure factories sharing one look: white template, pillar colours,
gridlines on the value axis only.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from esg_dashboard.data.records import Company, PricePoint

TEMPLATE = "plotly_white"
PILLAR_COLORS: Dict[str, str] = {
    "Environmental": "#2e7d32",
    "Social": "#1f77b4",
    "Governance": "#9467bd",
}
MEASURE_COLORS: Dict[str, str] = {
    "Score": "#ff7f0e",
    "Industry Mean": "#9ec3e6",
    "Industry Max": "#5b7fa6",
}
COLORWAY: List[str] = [*PILLAR_COLORS.values(), "#ff7f0e", "#d62728", "#8c564b", "#17becf", "#bcbd22"]

PILLARS = (
    ("Environmental", "environmental"),
    ("Social", "social"),
    ("Governance", "governance"),
)


def style_figure(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    hovermode: str = "x unified",
) -> go.Figure:
    fig.update_layout(
        template=TEMPLATE,
        colorway=COLORWAY,
        title=title,
        hovermode=hovermode,
        margin=dict(l=40, r=20, t=60, b=40),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, x=0),
    )
    fig.update_xaxes(showgrid=False)
    fig.update_yaxes(showgrid=True, zeroline=True, title=yaxis_title, tickformat=yaxis_tickformat)
    return fig


def render_plotly(fig: go.Figure) -> None:
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    barmode: str = "group",
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    color_discrete_map: Optional[Mapping[str, str]] = None,
    text_auto: bool = False,
) -> go.Figure:
    fig = px.bar(
        df,
        x=x,
        y=y,
        color=color,
        barmode=barmode,
        color_discrete_map=dict(color_discrete_map or {}),
        text_auto=".1f" if text_auto else False,
    )
    if text_auto:
        fig.update_traces(textposition="outside", cliponaxis=False)
    return style_figure(fig, title, yaxis_title)


def histogram(
    df: pd.DataFrame,
    x: str,
    nbins: Optional[int] = None,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
) -> go.Figure:
    fig = px.histogram(df, x=x, nbins=nbins, color_discrete_sequence=[PILLAR_COLORS["Environmental"]])
    fig.update_traces(marker_line_width=0)
    return style_figure(fig, title, yaxis_title, hovermode="closest")


def scatter_plot(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    hover_data: Optional[Iterable[str]] = None,
    log_x: bool = False,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
) -> go.Figure:
    fig = px.scatter(
        df,
        x=x,
        y=y,
        color=color,
        hover_data=list(hover_data) if hover_data else None,
        log_x=log_x,
    )
    return style_figure(fig, title, yaxis_title, hovermode="closest")


def esg_breakdown_frame(company: Company) -> pd.DataFrame:
    """Long-format score/mean/max per pillar for one company."""
    rows = []
    for pillar, attr in PILLARS:
        block = getattr(company.esg_scores, attr)
        rows.extend(
            {"pillar": pillar, "measure": measure, "value": value}
            for measure, value in (
                ("Score", block.score),
                ("Industry Mean", block.mean),
                ("Industry Max", block.max),
            )
        )
    return pd.DataFrame(rows)


def esg_breakdown_chart(company: Company) -> go.Figure:
    fig = bar_chart(
        esg_breakdown_frame(company),
        x="pillar",
        y="value",
        color="measure",
        title=f"{company.symbol} ESG Pillars vs Industry",
        yaxis_title="Score",
        color_discrete_map=MEASURE_COLORS,
        text_auto=True,
    )
    fig.update_layout(hovermode="closest")
    fig.update_xaxes(title=None)
    return fig


def price_history_chart(
    series_by_symbol: Mapping[str, Sequence[PricePoint]],
    title: Optional[str] = None,
    normalize: bool = False,
) -> go.Figure:
    """One line per symbol; `normalize` rebases each series to 100 at its first point."""
    fig = go.Figure()
    for symbol, points in series_by_symbol.items():
        if not points:
            continue
        prices = [p.price for p in points]
        if normalize and prices[0]:
            prices = [price / prices[0] * 100 for price in prices]
        fig.add_trace(
            go.Scatter(
                x=[p.date for p in points],
                y=prices,
                mode="lines",
                name=symbol,
                hovertemplate=f"{symbol}: " + ("%{y:.1f}" if normalize else "$%{y:,.2f}") + "<extra></extra>",
            )
        )
    if normalize:
        return style_figure(fig, title, "Indexed (first = 100)")
    return style_figure(fig, title, "Close Price (USD)", "$,.2f")
