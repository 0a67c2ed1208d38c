"""
Unit tests for filter state and the company table filters.
"""

import pandas as pd
import pytest

from esg_dashboard.data import filters
from esg_dashboard.data.csv_parser import parse_company_csv


@pytest.fixture
def companies_df(company_csv):
    return filters.companies_to_frame(parse_company_csv(company_csv).records)


def _state(**overrides):
    state = filters.default_filter_state(pd.Timestamp("2024-06-30"))
    for name, value in overrides.items():
        setattr(state, name, value)
    return state


class TestDefaultFilterState:
    """Tests for default_filter_state."""

    def test_one_year_window(self):
        """The default window spans the year up to today."""
        state = filters.default_filter_state(pd.Timestamp("2024-06-30 15:00"))
        assert state.time_range == (pd.Timestamp("2023-06-30"), pd.Timestamp("2024-06-30"))

    def test_no_restrictions(self):
        """Selections start empty with the full score range."""
        state = filters.default_filter_state()
        assert state.selected_sectors == []
        assert state.esg_score_range == (0.0, 100.0)
        assert state.sort_by == "total_esg_score"


class TestApplyFilters:
    """Tests for apply_filters."""

    def test_empty_selection_keeps_all_rows(self, companies_df):
        """Default state returns every company, sorted by score descending."""
        result = filters.apply_filters(companies_df, _state())
        assert list(result["symbol"]) == ["XOM", "AAPL", "MSFT"]

    def test_sector_filter(self, companies_df):
        """Only companies in the selected sectors remain."""
        result = filters.apply_filters(companies_df, _state(selected_sectors=["Energy"]))
        assert list(result["symbol"]) == ["XOM"]

    def test_industry_and_company_filters(self, companies_df):
        """Industry and company selections combine."""
        state = _state(
            selected_industries=["Technology Hardware", "Software & Services"],
            selected_companies=["MSFT"],
        )
        result = filters.apply_filters(companies_df, state)
        assert list(result["symbol"]) == ["MSFT"]

    def test_esg_range_inclusive(self, companies_df):
        """Scores on the range boundaries are kept."""
        result = filters.apply_filters(companies_df, _state(esg_score_range=(15.0, 17.2)))
        assert sorted(result["symbol"]) == ["AAPL", "MSFT"]

    def test_sort_ascending(self, companies_df):
        """Ascending direction reverses the order."""
        result = filters.apply_filters(companies_df, _state(sort_by="market_cap", sort_direction="asc"))
        assert list(result["symbol"]) == ["AAPL", "XOM", "MSFT"]

    def test_applied_filters_attr(self, companies_df):
        """The serialised state is attached to the result."""
        result = filters.apply_filters(companies_df, _state(selected_sectors=["Energy"]))
        assert result.attrs["applied_filters"]["selected_sectors"] == ["Energy"]

    def test_empty_frame_passthrough(self):
        """An empty table is returned unchanged."""
        empty = filters.companies_to_frame([])
        assert filters.apply_filters(empty, _state()).empty


class TestSortCompanies:
    """Tests for sort_companies."""

    def test_unknown_field_keeps_order(self, companies_df):
        """Sorting by an unknown column is a no-op."""
        result = filters.sort_companies(companies_df, "not_a_column")
        assert list(result["symbol"]) == ["AAPL", "MSFT", "XOM"]


class TestSerializeFilters:
    """Tests for serialize_filters."""

    def test_dates_become_iso_strings(self):
        """Timestamps in the time range are serialised as ISO strings."""
        payload = filters.serialize_filters(_state())
        assert payload["time_range"][1].startswith("2024-06-30")
        assert payload["sort_direction"] == "desc"
