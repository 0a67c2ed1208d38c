from __future__ import annotations

import pandas as pd
import streamlit as st

from esg_dashboard.data.prices import filter_series, find_symbol_column, latest_price, period_return, series_to_frame
from esg_dashboard.ui.components.charts import price_history_chart, render_plotly
from esg_dashboard.ui.components.tables import render_table
from esg_dashboard.ui.pages.context import PageContext
from esg_dashboard.ui.pages.helpers import cached_price_series

MAX_SYMBOLS = 10


def _default_symbols(df: pd.DataFrame, price_df: pd.DataFrame, limit: int = 3) -> list[str]:
    if df.empty or "symbol" not in df:
        return []
    ranked = df.sort_values("market_cap", ascending=False) if "market_cap" in df else df
    return [s for s in ranked["symbol"] if find_symbol_column(price_df.columns, s)][:limit]


def _returns_table(series: dict) -> pd.DataFrame:
    rows = []
    for symbol, points in series.items():
        if not points:
            continue
        rows.append(
            {
                "Symbol": symbol,
                "First Date": points[0].date.isoformat(),
                "Last Date": points[-1].date.isoformat(),
                "Last Close": latest_price(points),
                "Change (%)": period_return(points),
            }
        )
    return pd.DataFrame(rows)


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Price History")
    if context.price_df.empty:
        st.info("Price data is not available.")
        return
    if df.empty:
        st.info("No companies match the current filters.")
        return

    options = df["symbol"].astype(str).tolist()
    selected = st.multiselect(
        "Compare companies",
        options=options,
        default=_default_symbols(df, context.price_df),
        max_selections=MAX_SYMBOLS,
        key="esg_price_symbols",
    )
    if not selected:
        st.info("Pick one or more companies to compare.")
        return
    normalize = st.toggle("Index to 100 at range start", value=len(selected) > 1, key="esg_price_normalize")

    series = {
        symbol: filter_series(cached_price_series(symbol, context.price_df), context.filters.time_range)
        for symbol in selected
    }
    missing = [symbol for symbol, points in series.items() if not points]
    if missing:
        st.caption("No prices in range for: " + ", ".join(missing))
    if len(missing) == len(series):
        return

    render_plotly(price_history_chart(series, title="Closing Prices", normalize=normalize))
    render_table(
        _returns_table(series),
        column_config={"Last Close": {"type": "currency", "decimals": 2}, "Change (%)": {"type": "percent", "decimals": 1}},
        height=240,
        export_file_name="price_comparison.csv",
    )

    with st.expander("Daily closes in range"):
        daily = pd.concat(
            [series_to_frame(points, symbol) for symbol, points in series.items() if points],
            ignore_index=True,
        )
        render_table(
            daily[["date", "symbol", "price"]],
            column_config={"price": {"type": "currency", "decimals": 2}},
            column_labels={"date": "Date", "symbol": "Symbol", "price": "Close"},
            height=320,
            export_file_name="daily_closes.csv",
        )
