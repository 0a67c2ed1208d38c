"""
Record normalisation helpers: numeric coercion with safe fallbacks, company
name clean-up, and construction of typed records from mapped CSV fields.
"""

from __future__ import annotations

import math
import re
from typing import Mapping, Optional, Set

import numpy as np
import pandas as pd

from esg_dashboard.data.records import Company, EsgScores, ScoreBlock

SENTINELS: Set[str] = {"", "None", "none", "N/A", "n/a", "NA", "na", "null", "Null", "NaN", "nan", "-", "—"}

NUMERIC_NOISE = re.compile(r"[,\s$%]")

_WRAPPING_QUOTES = re.compile(r'^["\']+|["\']+$')
_WHITESPACE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.])")
_REPEATED_COMMAS = re.compile(r",{2,}")
_TRAILING_SEPARATORS = re.compile(r"[,;\s]+$")
_HTML_AMP = re.compile(r"&amp;", re.IGNORECASE)

TEXT_FIELDS = (
    "full_name",
    "gics_sector",
    "gics_sub_industry",
    "industry_code",
    "industry_name",
    "data_availability",
    "location",
)


def to_number(value, default: float = 0.0) -> float:
    """Convert CSV text to a float, returning `default` for anything unparsable.

    Thousands separators, currency and percent signs are ignored, so
    ``"2,500"`` and ``"$2,500"`` both become ``2500.0``.
    """
    if value is None:
        return default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
        return number if math.isfinite(number) else default
    text = str(value).strip()
    if text in SENTINELS:
        return default
    text = NUMERIC_NOISE.sub("", text)
    if not text:
        return default
    try:
        number = float(text)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def coerce_numeric(series: pd.Series, default: Optional[float] = None) -> pd.Series:
    """Vectorised `to_number`; unparsable cells become NaN unless `default` is given."""
    cleaned = series.astype(str).str.strip()
    cleaned = cleaned.where(~cleaned.isin(SENTINELS), None)
    cleaned = cleaned.str.replace(NUMERIC_NOISE, "", regex=True)
    numeric = pd.to_numeric(cleaned, errors="coerce").replace([np.inf, -np.inf], np.nan)
    if default is not None:
        numeric = numeric.fillna(default)
    return numeric.astype("float64")


def clean_text(value) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    return "" if text in SENTINELS else text


def clean_company_name(name, symbol: str = "") -> str:
    """Tidy a company display name; fall back to ``"<SYMBOL> Inc."`` when blank."""
    text = clean_text(name)
    text = _WRAPPING_QUOTES.sub("", text)
    text = _HTML_AMP.sub("&", text)
    text = _WHITESPACE.sub(" ", text)
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _REPEATED_COMMAS.sub(",", text)
    text = _TRAILING_SEPARATORS.sub("", text).strip()
    if not text and symbol:
        return f"{symbol} Inc."
    return text


def normalize_symbol(value) -> str:
    if value is None:
        return ""
    return str(value).strip().strip("\"'").upper()


def _block(fields: Mapping[str, str], prefix: str) -> ScoreBlock:
    return ScoreBlock(
        score=to_number(fields.get(f"{prefix}_score")),
        mean=to_number(fields.get(f"{prefix}_mean")),
        max=to_number(fields.get(f"{prefix}_max")),
    )


def company_from_fields(fields: Mapping[str, str]) -> Company:
    """Build a `Company` from canonical field name -> raw text.

    Missing text fields become ``""`` and missing numbers ``0.0``. The caller
    is responsible for rejecting rows without a symbol.
    """
    symbol = normalize_symbol(fields.get("symbol"))
    text_values = {name: clean_text(fields.get(name)) for name in TEXT_FIELDS}
    text_values["full_name"] = clean_company_name(fields.get("full_name"), symbol)
    return Company(
        symbol=symbol,
        market_cap=to_number(fields.get("market_cap")),
        beta=to_number(fields.get("beta")),
        overall_risk=to_number(fields.get("overall_risk")),
        esg_scores=EsgScores(
            total=to_number(fields.get("total_esg_score")),
            environmental=_block(fields, "environmental"),
            social=_block(fields, "social"),
            governance=_block(fields, "governance"),
            percentile=to_number(fields.get("percentile")),
            rating_year=to_number(fields.get("rating_year")),
            rating_month=to_number(fields.get("rating_month")),
        ),
        **text_values,
    )
