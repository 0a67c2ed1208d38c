"""
Unit tests for record normalisation helpers.
"""

import math

import pandas as pd
import pytest

from esg_dashboard.data import normalize


class TestToNumber:
    """Tests for to_number."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2,500", 2500.0),
            ("$1,234.50", 1234.5),
            ("12.5%", 12.5),
            (" 7 ", 7.0),
            ("-3.2", -3.2),
            (42, 42.0),
        ],
    )
    def test_parses_numeric_text(self, raw, expected):
        """Separators, currency and percent signs are ignored."""
        assert normalize.to_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "N/A", "null", "abc", "nan", float("inf")])
    def test_unparsable_returns_default(self, raw):
        """Anything unparsable or non-finite falls back to the default."""
        assert normalize.to_number(raw) == 0.0
        assert normalize.to_number(raw, default=-1.0) == -1.0


class TestCoerceNumeric:
    """Tests for the vectorised coercion."""

    def test_unparsable_cells_become_nan(self):
        """Blank and text cells are NaN when no default is given."""
        result = normalize.coerce_numeric(pd.Series(["1,000", "", "abc", "2.5"]))
        assert result.iloc[0] == 1000.0
        assert math.isnan(result.iloc[1])
        assert math.isnan(result.iloc[2])
        assert result.iloc[3] == 2.5

    def test_default_fills_missing(self):
        """A default replaces every unparsable cell."""
        result = normalize.coerce_numeric(pd.Series(["x", None]), default=0.0)
        assert list(result) == [0.0, 0.0]


class TestCleanCompanyName:
    """Tests for clean_company_name."""

    def test_collapses_whitespace_and_entities(self):
        """HTML ampersands and repeated spaces are tidied."""
        assert normalize.clean_company_name('  "AT&amp;T   Inc"  ') == "AT&T Inc"

    def test_strips_trailing_separators(self):
        """Trailing commas and stray spaces before punctuation are removed."""
        assert normalize.clean_company_name("Apple , Inc.,") == "Apple, Inc."

    def test_blank_name_falls_back_to_symbol(self):
        """An empty name becomes '<SYMBOL> Inc.'."""
        assert normalize.clean_company_name("", "XYZ") == "XYZ Inc."
        assert normalize.clean_company_name("N/A", "XYZ") == "XYZ Inc."


class TestCompanyFromFields:
    """Tests for company_from_fields."""

    def test_symbol_normalised(self):
        """Symbols are trimmed, unquoted and upper-cased."""
        company = normalize.company_from_fields({"symbol": " 'brk.b' "})
        assert company.symbol == "BRK.B"

    def test_missing_fields_take_defaults(self):
        """Absent text is empty and absent numbers are zero."""
        company = normalize.company_from_fields({"symbol": "AAA"})
        assert company.gics_sector == ""
        assert company.market_cap == 0.0
        assert company.esg_scores.social.max == 0.0

    def test_flat_layout(self):
        """to_flat exposes every nested score as a top-level column."""
        company = normalize.company_from_fields(
            {"symbol": "AAA", "governance_mean": "6.5", "total_esg_score": "20"}
        )
        flat = company.to_flat()
        assert flat["governance_mean"] == 6.5
        assert flat["total_esg_score"] == 20.0
        assert flat["symbol"] == "AAA"
