"""
Display formatting for scores, dollar amounts, percentages and plain numbers.

Every formatter renders missing or non-numeric input (None, NaN, text) as
``MISSING``.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

MISSING = "–"

MAGNITUDES: Tuple[Tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
)


def _as_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def scale_magnitude(value: float) -> Tuple[float, str]:
    """Scale `value` down to the largest matching magnitude suffix."""
    for threshold, suffix in MAGNITUDES:
        if abs(value) >= threshold:
            return value / threshold, suffix
    return value, ""


def format_number(value: Optional[float], decimals: int = 0) -> str:
    number = _as_float(value)
    return MISSING if number is None else f"{number:,.{decimals}f}"


def format_currency(
    value: Optional[float],
    symbol: str = "$",
    decimals: int = 2,
    compact: bool = True,
) -> str:
    """Dollar amount such as ``$2.50T``; pass ``compact=False`` for the full figure."""
    number = _as_float(value)
    if number is None:
        return MISSING
    scaled, suffix = scale_magnitude(number) if compact else (number, "")
    sign = "-" if scaled < 0 else ""
    return f"{sign}{symbol}{abs(scaled):,.{decimals}f}{suffix}"


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    number = _as_float(value)
    return MISSING if number is None else f"{number:.{decimals}f}%"


def format_score(value: Optional[float]) -> str:
    # a zero score means the rating was not reported
    number = _as_float(value)
    if number is None or number == 0:
        return MISSING
    return f"{number:.1f}"
