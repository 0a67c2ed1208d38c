"""
Typed in-memory records for company/ESG metadata and price history.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict


@dataclass
class ScoreBlock:
    score: float = 0.0
    mean: float = 0.0
    max: float = 0.0


@dataclass
class EsgScores:
    total: float = 0.0
    environmental: ScoreBlock = field(default_factory=ScoreBlock)
    social: ScoreBlock = field(default_factory=ScoreBlock)
    governance: ScoreBlock = field(default_factory=ScoreBlock)
    percentile: float = 0.0
    rating_year: float = 0.0
    rating_month: float = 0.0


@dataclass
class Company:
    symbol: str
    full_name: str = ""
    gics_sector: str = ""
    gics_sub_industry: str = ""
    industry_code: str = ""
    industry_name: str = ""
    data_availability: str = ""
    location: str = ""
    market_cap: float = 0.0
    beta: float = 0.0
    overall_risk: float = 0.0
    esg_scores: EsgScores = field(default_factory=EsgScores)

    def to_flat(self) -> Dict[str, Any]:
        """Flatten the nested score block into the column layout used by tables and filters."""
        scores = self.esg_scores
        return {
            "symbol": self.symbol,
            "full_name": self.full_name,
            "gics_sector": self.gics_sector,
            "gics_sub_industry": self.gics_sub_industry,
            "industry_code": self.industry_code,
            "industry_name": self.industry_name,
            "data_availability": self.data_availability,
            "location": self.location,
            "total_esg_score": scores.total,
            "environmental_score": scores.environmental.score,
            "environmental_mean": scores.environmental.mean,
            "environmental_max": scores.environmental.max,
            "social_score": scores.social.score,
            "social_mean": scores.social.mean,
            "social_max": scores.social.max,
            "governance_score": scores.governance.score,
            "governance_mean": scores.governance.mean,
            "governance_max": scores.governance.max,
            "percentile": scores.percentile,
            "rating_year": scores.rating_year,
            "rating_month": scores.rating_month,
            "market_cap": self.market_cap,
            "beta": self.beta,
            "overall_risk": self.overall_risk,
        }


@dataclass
class PriceData:
    """One row of the wide-format price file: a date and the closing price per ticker.

    Cells that were blank or unparsable hold NaN, so most rows are sparse.
    """

    date: str
    prices: Dict[str, float] = field(default_factory=dict)

    def price_for(self, symbol: str) -> float:
        return self.prices.get(symbol, math.nan)


@dataclass(frozen=True)
class PricePoint:
    date: date
    price: float
