"""
Metric cards laid out in rows of Streamlit columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence

import streamlit as st

from esg_dashboard.ui.components.formatting import format_currency, format_number, format_percent, format_score


@dataclass
class KpiCard:
    label: str
    value: Optional[float] = None
    kind: str = "number"  # number | currency | percent | score
    decimals: int = 0
    compact: bool = True
    display: Optional[str] = None
    help_text: Optional[str] = None

    def formatted(self) -> str:
        if self.display is not None:
            return self.display
        formatter = _FORMATTERS.get(self.kind, _FORMATTERS["number"])
        return formatter(self)


_FORMATTERS: Dict[str, Callable[[KpiCard], str]] = {
    "number": lambda card: format_number(card.value, decimals=card.decimals),
    "currency": lambda card: format_currency(card.value, decimals=card.decimals, compact=card.compact),
    "percent": lambda card: format_percent(card.value, decimals=card.decimals or 1),
    "score": lambda card: format_score(card.value),
}


def render_kpi_cards(cards: Sequence[KpiCard], columns: int = 3) -> None:
    cards = list(cards)
    if not cards:
        st.info("No metrics for the current selection.")
        return

    per_row = max(columns, 1)
    for start in range(0, len(cards), per_row):
        row = cards[start:start + per_row]
        for col, card in zip(st.columns(len(row)), row):
            col.metric(label=card.label, value=card.formatted(), help=card.help_text)
