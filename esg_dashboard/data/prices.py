"""
Per-symbol lookups over the wide-format price table.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from esg_dashboard.data.errors import SymbolNotFoundError
from esg_dashboard.data.records import PriceData, PricePoint


def _symbol_key(value: str) -> str:
    return str(value).strip().upper().replace(".", "-").replace("/", "-")


def find_symbol_column(columns: Iterable[str], symbol: str) -> Optional[str]:
    """Return the column holding `symbol`, matching exactly first, then loosely.

    The loose match ignores case and treats ``.``, ``/`` and ``-`` share-class
    separators alike, so ``BRK.B`` finds a ``BRK-B`` column.
    """
    columns = [c for c in columns if c != "date"]
    if symbol in columns:
        return symbol
    wanted = _symbol_key(symbol)
    for column in columns:
        if _symbol_key(column) == wanted:
            return column
    return None


def extract_price_series(frame: pd.DataFrame, symbol: str) -> List[PricePoint]:
    """Return the ordered date/price series for `symbol`, skipping non-numeric prices.

    Raises `SymbolNotFoundError` when no column matches the symbol.
    """
    column = find_symbol_column(frame.columns, symbol)
    if column is None:
        raise SymbolNotFoundError(symbol)
    working = frame[["date", column]].copy()
    working[column] = pd.to_numeric(working[column], errors="coerce")
    working["date"] = pd.to_datetime(working["date"], errors="coerce")
    working = working.dropna().sort_values("date", kind="stable")
    return [
        PricePoint(date=ts.date(), price=float(price))
        for ts, price in zip(working["date"], working[column])
    ]


def frame_to_records(frame: pd.DataFrame) -> List[PriceData]:
    """Convert the parsed wide frame to `PriceData` rows (ISO date + ticker -> price)."""
    tickers = [c for c in frame.columns if c != "date"]
    values = frame[tickers].to_numpy(dtype=float)
    return [
        PriceData(date=pd.Timestamp(stamp).date().isoformat(), prices=dict(zip(tickers, map(float, row))))
        for stamp, row in zip(frame["date"], values)
    ]


def records_to_frame(records: Sequence[PriceData]) -> pd.DataFrame:
    """Rebuild the wide frame from `PriceData` rows held in the store."""
    if not records:
        return pd.DataFrame(columns=["date"])
    frame = pd.DataFrame([r.prices for r in records])
    frame.insert(0, "date", pd.to_datetime([r.date for r in records]))
    return frame


def filter_series(
    points: Sequence[PricePoint],
    time_range: Tuple[Optional[date], Optional[date]],
) -> List[PricePoint]:
    """Keep points whose date falls inside the inclusive range; ``None`` bounds are open."""
    start, end = time_range
    start = _as_date(start)
    end = _as_date(end)
    return [
        p for p in points
        if (start is None or p.date >= start) and (end is None or p.date <= end)
    ]


def series_to_frame(points: Sequence[PricePoint], symbol: Optional[str] = None) -> pd.DataFrame:
    frame = pd.DataFrame(
        {"date": [pd.Timestamp(p.date) for p in points], "price": [p.price for p in points]},
    )
    if symbol is not None:
        frame["symbol"] = symbol
    return frame


def latest_price(points: Sequence[PricePoint]) -> Optional[float]:
    return points[-1].price if points else None


def period_return(points: Sequence[PricePoint]) -> Optional[float]:
    """Percent change from the first to the last point, or None if undefined."""
    if len(points) < 2:
        return None
    first, last = points[0].price, points[-1].price
    if first == 0 or math.isnan(first) or math.isnan(last):
        return None
    return (last - first) / first * 100


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return pd.Timestamp(value).date()
