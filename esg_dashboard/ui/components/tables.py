"""
Company and price tables: per-column display formats plus a CSV export of
the raw (unformatted) values.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

import pandas as pd
import streamlit as st

from esg_dashboard.ui.components.formatting import (
    format_currency,
    format_number,
    format_percent,
    format_score,
)

ColumnFormat = Mapping[str, Any]

_CELL_FORMATTERS: Dict[str, Callable[[Any, int], str]] = {
    "currency": lambda v, d: format_currency(v, decimals=d),
    "percent": lambda v, d: format_percent(v, decimals=d),
    "number": lambda v, d: format_number(v, decimals=d),
    "score": lambda v, d: format_score(v),
}


def format_columns(df: pd.DataFrame, column_formats: Mapping[str, ColumnFormat]) -> pd.DataFrame:
    """Copy of `df` with configured columns turned into display strings; unknown types are left as-is."""
    display = df.copy()
    for column, fmt in column_formats.items():
        formatter = _CELL_FORMATTERS.get(str(fmt.get("type")))
        if column not in display.columns or formatter is None:
            continue
        decimals = int(fmt.get("decimals", 0))
        display[column] = [formatter(v, decimals) for v in display[column]]
    return display


def render_table(
    df: pd.DataFrame,
    column_config: Optional[Mapping[str, ColumnFormat]] = None,
    column_labels: Optional[Mapping[str, str]] = None,
    height: int = 400,
    export_file_name: str = "export.csv",
) -> None:
    if df.empty:
        st.info("Nothing to show for the current selection.")
        return

    display = format_columns(df, column_config or {})
    if column_labels:
        display = display.rename(columns=dict(column_labels))
    st.dataframe(display, use_container_width=True, height=height, hide_index=True)

    st.download_button(
        f"Download {len(df):,} rows as CSV",
        data=df.to_csv(index=False).encode("utf-8"),
        file_name=export_file_name,
        mime="text/csv",
        key=f"download_{export_file_name}",
    )
