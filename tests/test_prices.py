"""
Unit tests for per-symbol price lookups.
"""

import math
from datetime import date

import pandas as pd
import pytest

from esg_dashboard.data import prices
from esg_dashboard.data.csv_parser import parse_price_csv
from esg_dashboard.data.errors import DataLoadError, SymbolNotFoundError
from esg_dashboard.data.records import PricePoint


@pytest.fixture
def price_frame(price_csv):
    frame, _ = parse_price_csv(price_csv)
    return frame


class TestFindSymbolColumn:
    """Tests for find_symbol_column."""

    def test_exact_match(self):
        """An exact column name is returned as-is."""
        assert prices.find_symbol_column(["date", "AAPL"], "AAPL") == "AAPL"

    def test_share_class_separator(self):
        """BRK.B matches a BRK-B column."""
        assert prices.find_symbol_column(["date", "BRK-B"], "BRK.B") == "BRK-B"

    def test_case_insensitive(self):
        """Lower-case input still matches."""
        assert prices.find_symbol_column(["date", "MSFT"], "msft") == "MSFT"

    def test_date_column_never_matches(self):
        """The date column is not a ticker."""
        assert prices.find_symbol_column(["date"], "date") is None


class TestExtractPriceSeries:
    """Tests for extract_price_series."""

    def test_series_in_date_order(self, price_frame):
        """Every numeric price is returned, oldest first."""
        series = prices.extract_price_series(price_frame, "AAPL")
        assert [p.date for p in series] == [
            date(2024, 1, 2),
            date(2024, 1, 3),
            date(2024, 1, 4),
            date(2024, 1, 5),
        ]
        assert series[0].price == pytest.approx(185.64)

    def test_missing_prices_excluded(self, price_frame):
        """Blank and non-numeric cells are left out of the series."""
        msft = prices.extract_price_series(price_frame, "MSFT")
        brk = prices.extract_price_series(price_frame, "BRK.B")
        assert date(2024, 1, 3) not in [p.date for p in msft]
        assert len(msft) == 3
        assert len(brk) == 3
        assert all(not math.isnan(p.price) for p in brk)

    def test_unknown_symbol_raises(self, price_frame):
        """A symbol absent from the header raises SymbolNotFoundError."""
        with pytest.raises(SymbolNotFoundError) as excinfo:
            prices.extract_price_series(price_frame, "ZZZZ")
        assert excinfo.value.symbol == "ZZZZ"
        assert "ZZZZ" in str(excinfo.value)

    def test_not_found_is_lookup_and_load_error(self, price_frame):
        """The error can be caught as KeyError or as a load failure."""
        with pytest.raises(KeyError):
            prices.extract_price_series(price_frame, "ZZZZ")
        with pytest.raises(DataLoadError):
            prices.extract_price_series(price_frame, "ZZZZ")


class TestRecords:
    """Tests for conversion between the wide frame and PriceData rows."""

    def test_frame_to_records(self, price_frame):
        """One PriceData per row with ISO dates."""
        records = prices.frame_to_records(price_frame)
        assert len(records) == 4
        assert records[0].date == "2024-01-02"
        assert records[0].price_for("AAPL") == pytest.approx(185.64)
        assert math.isnan(records[1].price_for("MSFT"))
        assert math.isnan(records[0].price_for("UNKNOWN"))

    def test_records_to_frame(self, price_frame):
        """Rebuilding the frame keeps dates and tickers."""
        rebuilt = prices.records_to_frame(prices.frame_to_records(price_frame))
        assert list(rebuilt.columns) == ["date", "AAPL", "MSFT", "BRK-B"]
        assert rebuilt["date"].iloc[-1] == pd.Timestamp("2024-01-05")

    def test_empty_records(self):
        """No records gives an empty frame with a date column."""
        frame = prices.records_to_frame([])
        assert frame.empty
        assert "date" in frame.columns


class TestSeriesHelpers:
    """Tests for range filtering and summary helpers."""

    points = [
        PricePoint(date(2024, 1, 1), 100.0),
        PricePoint(date(2024, 2, 1), 110.0),
        PricePoint(date(2024, 3, 1), 120.0),
    ]

    def test_filter_inclusive(self):
        """Both range ends are inclusive."""
        result = prices.filter_series(self.points, (date(2024, 1, 1), date(2024, 2, 1)))
        assert [p.price for p in result] == [100.0, 110.0]

    def test_filter_open_bounds(self):
        """None bounds do not restrict."""
        assert prices.filter_series(self.points, (None, None)) == self.points
        result = prices.filter_series(self.points, (pd.Timestamp("2024-02-01"), None))
        assert [p.price for p in result] == [110.0, 120.0]

    def test_latest_price(self):
        """Latest price is the last point, or None when empty."""
        assert prices.latest_price(self.points) == 120.0
        assert prices.latest_price([]) is None

    def test_period_return(self):
        """Percent change first to last."""
        assert prices.period_return(self.points) == pytest.approx(20.0)
        assert prices.period_return(self.points[:1]) is None

    def test_series_to_frame(self):
        """The frame carries date, price and an optional symbol column."""
        frame = prices.series_to_frame(self.points, symbol="AAA")
        assert list(frame.columns) == ["date", "price", "symbol"]
        assert len(frame) == 3
