"""
Layout helpers for the Streamlit application (page setup and sidebar filters).
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Tuple

import pandas as pd
import streamlit as st

from esg_dashboard.data.filters import (
    ESG_SCORE_BOUNDS,
    SORT_DIRECTIONS,
    SORT_FIELDS,
    FilterState,
    default_filter_state,
)

DATE_PRESETS = ["All", "5Y", "3Y", "1Y", "6M", "YTD", "Custom"]
DEFAULT_DATE_PRESET = "1Y"
STATE_PREFIX = "esg_filter_"


def setup_page() -> None:
    """Set Streamlit page configuration."""
    st.set_page_config(
        page_title="S&P 500 ESG Explorer",
        layout="wide",
        page_icon=":seedling:",
    )


def _options(df: pd.DataFrame, column: str) -> List[str]:
    if column not in df:
        return []
    values = df[column].dropna().astype(str)
    return sorted(v for v in values.unique() if v)


def _multiselect_with_counts(
    label: str,
    key: str,
    options: List[str],
    series: pd.Series,
    default: Optional[List[str]] = None,
) -> List[str]:
    if not options:
        return []
    counts = series.value_counts(dropna=False).to_dict()
    return st.multiselect(
        label=label,
        options=options,
        default=[v for v in (default or []) if v in options],
        key=key,
        format_func=lambda v: f"{v} ({int(counts.get(v, 0))})",
        placeholder="All",
    )


def _as_date(value, fallback_ts: pd.Timestamp) -> dt.date:
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return pd.to_datetime(value).date()
    except (TypeError, ValueError):
        return fallback_ts.date()


def preset_range(
    preset: str,
    min_date: Optional[pd.Timestamp],
    max_date: Optional[pd.Timestamp],
    today: Optional[pd.Timestamp] = None,
) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    """Resolve a date preset against the available data window."""
    today = (today or pd.Timestamp.today()).normalize()
    end = max_date if max_date is not None else today
    if preset == "All":
        return min_date, max_date
    if preset == "5Y":
        return end - pd.DateOffset(years=5), end
    if preset == "3Y":
        return end - pd.DateOffset(years=3), end
    if preset == "1Y":
        return end - pd.DateOffset(years=1), end
    if preset == "6M":
        return end - pd.DateOffset(months=6), end
    if preset == "YTD":
        return pd.Timestamp(year=end.year, month=1, day=1), end
    return min_date, max_date


def _derive_time_range(
    date_series: pd.Series,
    defaults: FilterState,
) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    dates = pd.to_datetime(date_series, errors="coerce").dropna()
    min_date = dates.min() if not dates.empty else None
    max_date = dates.max() if not dates.empty else None

    preset = st.sidebar.selectbox(
        "Time Range",
        DATE_PRESETS,
        index=DATE_PRESETS.index(DEFAULT_DATE_PRESET),
        key=f"{STATE_PREFIX}date_preset",
        help="Window applied to price charts. Presets end at the latest available price date.",
    )

    if preset != "Custom":
        return preset_range(preset, min_date, max_date)

    default_start, default_end = defaults.time_range
    fallback_start = min_date if min_date is not None else default_start
    fallback_end = max_date if max_date is not None else default_end
    col_start, col_end = st.sidebar.columns(2)
    with col_start:
        start_input = st.date_input(
            "Start",
            value=_as_date(st.session_state.get(f"{STATE_PREFIX}date_start"), fallback_start),
            key=f"{STATE_PREFIX}date_start",
        )
    with col_end:
        end_input = st.date_input(
            "End",
            value=_as_date(st.session_state.get(f"{STATE_PREFIX}date_end"), fallback_end),
            key=f"{STATE_PREFIX}date_end",
        )
    start, end = pd.Timestamp(start_input), pd.Timestamp(end_input)
    if start > end:
        st.sidebar.warning("Start date must be before or equal to End date. Adjusting range.")
        start, end = end, start
    return start, end


def _clear_state_prefixes(prefixes: List[str]) -> None:
    for prefix in prefixes:
        for key in list(st.session_state.keys()):
            if key.startswith(prefix):
                del st.session_state[key]


def sidebar_filters_ui(
    df: pd.DataFrame,
    price_dates: Optional[pd.Series] = None,
    defaults: Optional[FilterState] = None,
) -> FilterState:
    """
    Render the sidebar filter controls and return the selected values.
    """
    defaults = defaults or default_filter_state()
    st.sidebar.header("Filters")
    working = df if not df.empty else pd.DataFrame()

    time_range = _derive_time_range(
        price_dates if price_dates is not None else pd.Series(dtype="datetime64[ns]"),
        defaults,
    )

    with st.sidebar.expander("Classification", expanded=True):
        selected_sectors = _multiselect_with_counts(
            "Sector",
            key=f"{STATE_PREFIX}sectors",
            options=_options(working, "gics_sector"),
            series=working.get("gics_sector", pd.Series(dtype=str)),
            default=defaults.selected_sectors,
        )
        industry_scope = working
        if selected_sectors and "gics_sector" in working:
            industry_scope = working[working["gics_sector"].isin(selected_sectors)]
        selected_industries = _multiselect_with_counts(
            "Industry",
            key=f"{STATE_PREFIX}industries",
            options=_options(industry_scope, "industry_name"),
            series=industry_scope.get("industry_name", pd.Series(dtype=str)),
            default=defaults.selected_industries,
        )
        location_filter = _multiselect_with_counts(
            "Location",
            key=f"{STATE_PREFIX}locations",
            options=_options(working, "location"),
            series=working.get("location", pd.Series(dtype=str)),
            default=defaults.location_filter,
        )
        data_availability_filter = _multiselect_with_counts(
            "Data Availability",
            key=f"{STATE_PREFIX}availability",
            options=_options(working, "data_availability"),
            series=working.get("data_availability", pd.Series(dtype=str)),
            default=defaults.data_availability_filter,
        )

    with st.sidebar.expander("Companies & Scores", expanded=False):
        symbols = _options(working, "symbol")
        selected_companies = st.multiselect(
            "Companies",
            options=symbols,
            default=[s for s in defaults.selected_companies if s in symbols],
            key=f"{STATE_PREFIX}companies",
            placeholder="All",
        )
        low, high = st.slider(
            "Total ESG Score",
            min_value=float(ESG_SCORE_BOUNDS[0]),
            max_value=float(ESG_SCORE_BOUNDS[1]),
            value=(float(defaults.esg_score_range[0]), float(defaults.esg_score_range[1])),
            step=1.0,
            key=f"{STATE_PREFIX}esg_range",
            help="Inclusive range; companies without a reported score load as 0.",
        )

    sort_keys = list(SORT_FIELDS.keys())
    sort_col, dir_col = st.sidebar.columns([2, 1])
    with sort_col:
        sort_by = st.selectbox(
            "Sort by",
            options=sort_keys,
            index=sort_keys.index(defaults.sort_by) if defaults.sort_by in sort_keys else 0,
            format_func=lambda k: SORT_FIELDS[k],
            key=f"{STATE_PREFIX}sort_by",
        )
    with dir_col:
        sort_direction = st.selectbox(
            "Order",
            options=list(SORT_DIRECTIONS),
            index=list(SORT_DIRECTIONS).index(defaults.sort_direction) if defaults.sort_direction in SORT_DIRECTIONS else 0,
            key=f"{STATE_PREFIX}sort_direction",
        )

    if st.sidebar.button("Reset Filters", key="esg_reset_filters", type="primary"):
        _clear_state_prefixes([STATE_PREFIX])
        st.rerun()

    return FilterState(
        time_range=time_range,
        selected_sectors=selected_sectors,
        selected_industries=selected_industries,
        selected_companies=selected_companies,
        location_filter=location_filter,
        data_availability_filter=data_availability_filter,
        esg_score_range=(low, high),
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
