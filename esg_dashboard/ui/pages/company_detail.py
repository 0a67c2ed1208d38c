from __future__ import annotations

import pandas as pd
import streamlit as st

from esg_dashboard.data import store
from esg_dashboard.data.prices import filter_series, latest_price, period_return
from esg_dashboard.ui.components.charts import esg_breakdown_chart, price_history_chart, render_plotly
from esg_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from esg_dashboard.ui.pages.context import PageContext
from esg_dashboard.ui.pages.helpers import cached_price_series


SELECTION_KEY = "esg_selected_company"


def initial_index(options: list[str], session_state) -> int:
    """Position of this session's last pick in `options`, or 0 when it is gone."""
    current = session_state.get(SELECTION_KEY)
    return options.index(current) if current in options else 0


def _symbol_options(df: pd.DataFrame) -> list[str]:
    return df["symbol"].dropna().astype(str).tolist() if "symbol" in df else []


def _label_for(df: pd.DataFrame):
    names = dict(zip(df["symbol"], df["full_name"])) if {"symbol", "full_name"}.issubset(df.columns) else {}
    return lambda symbol: f"{symbol} · {names.get(symbol, '')}".rstrip(" ·")


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Company Detail")
    options = _symbol_options(df)
    if not options:
        st.info("No companies match the current filters.")
        return

    # The pick lives in session_state; the shared store only mirrors the latest one for subscribers.
    symbol = st.selectbox(
        "Company",
        options=options,
        index=initial_index(options, st.session_state),
        format_func=_label_for(df),
        key="esg_detail_symbol",
    )
    if symbol != st.session_state.get(SELECTION_KEY):
        st.session_state[SELECTION_KEY] = symbol
        store.selected_company.set(symbol)

    company = context.company(symbol)
    if company is None:
        st.warning(f"{symbol} is not in the loaded dataset.")
        return

    scores = company.esg_scores
    st.markdown(f"### {company.full_name}")
    meta = [part for part in (company.gics_sector, company.industry_name, company.location) if part]
    if meta:
        st.caption(" · ".join(meta))

    rating = (
        f"{int(scores.rating_year)}-{int(scores.rating_month):02d}"
        if scores.rating_year and scores.rating_month
        else "–"
    )
    render_kpi_cards(
        [
            KpiCard(label="Total ESG", value=scores.total, kind="score"),
            KpiCard(label="Percentile", value=scores.percentile, decimals=0),
            KpiCard(label="Rating Period", display=rating),
            KpiCard(label="Market Cap", value=company.market_cap, kind="currency", decimals=2),
            KpiCard(label="Beta", value=company.beta, decimals=2),
            KpiCard(label="Data Availability", display=company.data_availability or "–"),
        ],
        columns=3,
    )

    render_plotly(esg_breakdown_chart(company))

    st.markdown("#### Price History")
    points = cached_price_series(symbol, context.price_df)
    if not points:
        st.info(f"No price history available for {symbol}.")
        return
    in_range = filter_series(points, context.filters.time_range)
    if not in_range:
        st.info("No prices fall inside the selected time range.")
        return

    change = period_return(in_range)
    render_kpi_cards(
        [
            KpiCard(label="Last Close", value=latest_price(in_range), kind="currency", decimals=2, compact=False),
            KpiCard(label="Change over Range", value=change, kind="percent"),
            KpiCard(label="Trading Days", value=float(len(in_range))),
        ],
        columns=3,
    )
    render_plotly(price_history_chart({symbol: in_range}, title=f"{symbol} Closing Price"))
