from __future__ import annotations

import pandas as pd
import streamlit as st

from esg_dashboard.ui.components.tables import render_table
from esg_dashboard.ui.pages.context import PageContext


DEFAULT_COLUMNS = [
    "symbol",
    "full_name",
    "gics_sector",
    "industry_name",
    "location",
    "total_esg_score",
    "environmental_score",
    "social_score",
    "governance_score",
    "percentile",
    "market_cap",
    "beta",
    "data_availability",
]

COLUMN_LABELS = {
    "symbol": "Symbol",
    "full_name": "Company",
    "gics_sector": "Sector",
    "gics_sub_industry": "Sub-Industry",
    "industry_code": "Industry Code",
    "industry_name": "Industry",
    "location": "Location",
    "total_esg_score": "Total ESG",
    "environmental_score": "Environmental",
    "social_score": "Social",
    "governance_score": "Governance",
    "percentile": "Percentile",
    "market_cap": "Market Cap",
    "beta": "Beta",
    "data_availability": "Data Availability",
}

COLUMN_FORMATS = {
    "total_esg_score": {"type": "score"},
    "environmental_score": {"type": "score"},
    "social_score": {"type": "score"},
    "governance_score": {"type": "score"},
    "percentile": {"type": "number", "decimals": 0},
    "market_cap": {"type": "currency", "decimals": 2},
    "beta": {"type": "number", "decimals": 2},
}


def search_companies(df: pd.DataFrame, term: str) -> pd.DataFrame:
    """Case-insensitive match on symbol or company name."""
    term = term.strip().lower()
    if not term or df.empty:
        return df
    mask = pd.Series(False, index=df.index)
    for col in ("symbol", "full_name"):
        if col in df:
            mask |= df[col].astype(str).str.lower().str.contains(term, na=False, regex=False)
    return df[mask]


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Companies")
    if df.empty:
        st.info("No companies to explore.")
        return

    search = st.text_input("Search by symbol or name", key="esg_companies_search")
    filtered = search_companies(df, search)
    if filtered.empty:
        st.info("No records match the search term.")
        return

    available_columns = [col for col in DEFAULT_COLUMNS if col in filtered.columns]
    selected_columns = st.multiselect(
        "Columns to display",
        options=available_columns,
        default=available_columns,
        format_func=lambda c: COLUMN_LABELS.get(c, c),
        key="esg_companies_columns",
    )
    if not selected_columns:
        st.info("Select at least one column to display.")
        return

    st.caption(f"{len(filtered):,} companies, sorted by {COLUMN_LABELS.get(context.filters.sort_by, context.filters.sort_by)} ({context.filters.sort_direction}).")
    render_table(
        filtered[selected_columns],
        column_config=COLUMN_FORMATS,
        column_labels=COLUMN_LABELS,
        height=520,
        export_file_name="esg_companies_filtered.csv",
    )
