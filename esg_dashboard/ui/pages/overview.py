from __future__ import annotations

import pandas as pd
import streamlit as st

from esg_dashboard.ui.components.charts import bar_chart, histogram, render_plotly, scatter_plot, PILLAR_COLORS
from esg_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from esg_dashboard.ui.pages.context import PageContext
from esg_dashboard.ui.pages.helpers import pillar_long, reported_scores, safe_mean, safe_sum


def _headline_cards(df: pd.DataFrame) -> list[KpiCard]:
    return [
        KpiCard(label="Companies", value=float(df["symbol"].nunique()) if "symbol" in df else 0.0),
        KpiCard(
            label="Avg Total ESG",
            value=safe_mean(df.get("total_esg_score", pd.Series(dtype=float))),
            decimals=1,
            help_text="Mean of reported total scores; unreported companies are excluded.",
        ),
        KpiCard(label="Avg Environmental", value=safe_mean(df.get("environmental_score", pd.Series(dtype=float))), decimals=1),
        KpiCard(label="Avg Social", value=safe_mean(df.get("social_score", pd.Series(dtype=float))), decimals=1),
        KpiCard(label="Avg Governance", value=safe_mean(df.get("governance_score", pd.Series(dtype=float))), decimals=1),
        KpiCard(
            label="Combined Market Cap",
            value=safe_sum(df.get("market_cap", pd.Series(dtype=float))),
            kind="currency",
            decimals=2,
        ),
    ]


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Overview")
    if df.empty:
        st.info("No companies match the current filters.")
        return

    render_kpi_cards(_headline_cards(df), columns=3)
    st.divider()

    left, right = st.columns(2)
    with left:
        long = pillar_long(df)
        if long.empty:
            st.info("Sector information unavailable.")
        else:
            fig = bar_chart(
                long,
                x="gics_sector",
                y="score",
                color="pillar",
                barmode="group",
                title="Average Pillar Scores by Sector",
                yaxis_title="Score",
                color_discrete_map=PILLAR_COLORS,
            )
            fig.update_xaxes(title=None, tickangle=-30)
            render_plotly(fig)

    with right:
        scores = reported_scores(df["total_esg_score"]) if "total_esg_score" in df else pd.Series(dtype=float)
        if scores.empty:
            st.info("No reported ESG scores for the current selection.")
        else:
            fig = histogram(
                scores.to_frame("total_esg_score"),
                x="total_esg_score",
                nbins=30,
                title="Total ESG Score Distribution",
                yaxis_title="Companies",
            )
            render_plotly(fig)

    scatter_df = df[(pd.to_numeric(df["market_cap"], errors="coerce") > 0) & (pd.to_numeric(df["total_esg_score"], errors="coerce") > 0)]
    if not scatter_df.empty:
        fig = scatter_plot(
            scatter_df,
            x="market_cap",
            y="total_esg_score",
            color="gics_sector" if scatter_df["gics_sector"].astype(bool).any() else None,
            hover_data=["symbol", "full_name"],
            log_x=True,
            title="Market Cap vs Total ESG Score",
            yaxis_title="Total ESG Score",
        )
        fig.update_xaxes(title="Market Cap (log scale)")
        render_plotly(fig)
    st.caption("Scores of 0 indicate the rating was not reported and are left out of averages and charts.")
