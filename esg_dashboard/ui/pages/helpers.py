from __future__ import annotations

from typing import Optional

import pandas as pd

from esg_dashboard.data import store
from esg_dashboard.data.errors import SymbolNotFoundError
from esg_dashboard.data.prices import extract_price_series
from esg_dashboard.data.records import PricePoint

SCORE_COLUMNS = ["total_esg_score", "environmental_score", "social_score", "governance_score"]


def reported_scores(series: pd.Series) -> pd.Series:
    """Numeric scores with unreported values (0 or unparsable) removed."""
    cleaned = pd.to_numeric(series, errors="coerce")
    return cleaned[cleaned > 0]


def safe_mean(series: pd.Series) -> Optional[float]:
    cleaned = reported_scores(series)
    if cleaned.empty:
        return None
    return float(cleaned.mean())


def safe_sum(series: pd.Series) -> Optional[float]:
    cleaned = pd.to_numeric(series, errors="coerce").dropna()
    if cleaned.empty:
        return None
    return float(cleaned.sum())


def sector_summary(df: pd.DataFrame, group_col: str = "gics_sector") -> pd.DataFrame:
    """Company count and mean reported pillar scores per sector."""
    if df.empty or group_col not in df.columns:
        return pd.DataFrame(columns=[group_col, "companies", *SCORE_COLUMNS])
    working = df[df[group_col].astype(str).str.len() > 0].copy()
    if working.empty:
        return pd.DataFrame(columns=[group_col, "companies", *SCORE_COLUMNS])
    for col in SCORE_COLUMNS:
        if col in working:
            working[col] = pd.to_numeric(working[col], errors="coerce").where(lambda s: s > 0)
    grouped = (
        working.groupby(group_col)
        .agg(companies=("symbol", "nunique"), **{col: (col, "mean") for col in SCORE_COLUMNS if col in working})
        .reset_index()
    )
    return grouped.sort_values("companies", ascending=False)


def pillar_long(df: pd.DataFrame, group_col: str = "gics_sector") -> pd.DataFrame:
    summary = sector_summary(df, group_col)
    pillars = {
        "environmental_score": "Environmental",
        "social_score": "Social",
        "governance_score": "Governance",
    }
    value_cols = [c for c in pillars if c in summary.columns]
    if summary.empty or not value_cols:
        return pd.DataFrame(columns=[group_col, "pillar", "score"])
    long = summary.melt(id_vars=[group_col], value_vars=value_cols, var_name="pillar", value_name="score")
    long["pillar"] = long["pillar"].map(pillars)
    return long.dropna(subset=["score"])


def cached_price_series(symbol: str, price_df: pd.DataFrame) -> list[PricePoint]:
    """Series for `symbol` from the keyed store, filled from the wide frame on first use.

    Symbols without a price column are cached as an empty series.
    """
    cached = store.price_series.get().get(symbol)
    if cached is not None:
        return cached
    try:
        points = extract_price_series(price_df, symbol)
    except SymbolNotFoundError:
        points = []
    store.price_series.update(lambda current: {**current, symbol: points})
    return points
