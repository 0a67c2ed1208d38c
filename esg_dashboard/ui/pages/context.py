from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from esg_dashboard.data.filters import FilterState
from esg_dashboard.data.records import Company


@dataclass
class PageContext:
    companies: List[Company]
    companies_df: pd.DataFrame
    price_df: pd.DataFrame
    filters: FilterState
    diagnostics: Dict[str, Dict[str, object]] = field(default_factory=dict)

    def company(self, symbol: str) -> Company | None:
        return next((c for c in self.companies if c.symbol == symbol), None)
