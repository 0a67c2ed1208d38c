"""
Filter state and the helpers that apply it to the company/ESG table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from esg_dashboard.data.records import Company

FLAT_COLUMNS: List[str] = list(Company(symbol="").to_flat().keys())

SORT_FIELDS: Dict[str, str] = {
    "total_esg_score": "Total ESG Score",
    "environmental_score": "Environmental Score",
    "social_score": "Social Score",
    "governance_score": "Governance Score",
    "percentile": "Percentile",
    "market_cap": "Market Cap",
    "beta": "Beta",
    "symbol": "Symbol",
    "full_name": "Company Name",
}

SORT_DIRECTIONS = ("desc", "asc")
ESG_SCORE_BOUNDS: Tuple[float, float] = (0.0, 100.0)


@dataclass
class FilterState:
    time_range: Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]
    selected_sectors: List[str] = field(default_factory=list)
    selected_industries: List[str] = field(default_factory=list)
    selected_companies: List[str] = field(default_factory=list)
    location_filter: List[str] = field(default_factory=list)
    data_availability_filter: List[str] = field(default_factory=list)
    esg_score_range: Tuple[float, float] = ESG_SCORE_BOUNDS
    sort_by: str = "total_esg_score"
    sort_direction: str = "desc"


def default_filter_state(today: Optional[pd.Timestamp] = None) -> FilterState:
    """Fresh filter state covering the year up to `today`."""
    end = pd.Timestamp(today if today is not None else pd.Timestamp.today()).normalize()
    start = end - pd.DateOffset(years=1)
    return FilterState(time_range=(start, end))


def companies_to_frame(companies: Sequence[Company]) -> pd.DataFrame:
    return pd.DataFrame([c.to_flat() for c in companies], columns=FLAT_COLUMNS)


def _first_column(df: pd.DataFrame, candidates: Sequence[str]) -> Optional[str]:
    return next((col for col in candidates if col in df.columns), None)


def apply_filters(df: pd.DataFrame, state: FilterState) -> pd.DataFrame:
    """
    Apply the current selections to the flat company table.

    Empty selections mean "no restriction". The ESG score range is inclusive
    on both ends. The serialised state is kept in ``attrs["applied_filters"]``.
    """
    if df.empty:
        return df
    filtered = df.copy()

    sector_col = _first_column(filtered, ["gics_sector", "industry_name"])
    if state.selected_sectors and sector_col:
        filtered = filtered[filtered[sector_col].isin(state.selected_sectors)]

    industry_col = _first_column(filtered, ["industry_name", "gics_sub_industry"])
    if state.selected_industries and industry_col:
        filtered = filtered[filtered[industry_col].isin(state.selected_industries)]

    if state.selected_companies and "symbol" in filtered:
        filtered = filtered[filtered["symbol"].isin(state.selected_companies)]

    if state.location_filter and "location" in filtered:
        filtered = filtered[filtered["location"].isin(state.location_filter)]

    if state.data_availability_filter and "data_availability" in filtered:
        filtered = filtered[filtered["data_availability"].isin(state.data_availability_filter)]

    if state.esg_score_range and "total_esg_score" in filtered:
        low, high = state.esg_score_range
        scores = pd.to_numeric(filtered["total_esg_score"], errors="coerce")
        mask = scores.notna()
        if low is not None:
            mask &= scores >= low
        if high is not None:
            mask &= scores <= high
        filtered = filtered[mask]

    filtered = sort_companies(filtered, state.sort_by, state.sort_direction)
    filtered.attrs["applied_filters"] = serialize_filters(state)
    return filtered


def sort_companies(df: pd.DataFrame, sort_by: str, direction: str = "desc") -> pd.DataFrame:
    """Stable sort by `sort_by`; unknown fields leave the order untouched."""
    if df.empty or sort_by not in df.columns:
        return df
    return df.sort_values(
        sort_by,
        ascending=str(direction).lower() == "asc",
        kind="stable",
        na_position="last",
    )


def serialize_filters(state: FilterState) -> Dict[str, Any]:
    """
    Convert the FilterState dataclass to a JSON-serialisable dictionary to be
    stored in session_state or used for logging/debugging.
    """
    return {
        "time_range": tuple(
            v.isoformat() if hasattr(v, "isoformat") else v for v in state.time_range
        ),
        "selected_sectors": list(state.selected_sectors),
        "selected_industries": list(state.selected_industries),
        "selected_companies": list(state.selected_companies),
        "location_filter": list(state.location_filter),
        "data_availability_filter": list(state.data_availability_filter),
        "esg_score_range": tuple(state.esg_score_range),
        "sort_by": state.sort_by,
        "sort_direction": state.sort_direction,
    }
