"""
Unit tests for the reactive store.
"""

from esg_dashboard.data import store
from esg_dashboard.data.filters import FilterState


class TestStore:
    """Tests for Store."""

    def test_subscribe_receives_current_value(self):
        """A new subscriber is called immediately with the current value."""
        s = store.Store(list, name="test")
        seen = []
        s.subscribe(seen.append)
        assert seen == [[]]

    def test_set_notifies_subscribers(self):
        """Every set pushes the new value to subscribers."""
        s = store.Store(0, name="test")
        seen = []
        s.subscribe(seen.append)
        s.set(1)
        s.update(lambda v: v + 1)
        assert seen == [0, 1, 2]
        assert s.get() == 2

    def test_unsubscribe_stops_notifications(self):
        """After unsubscribing no further calls arrive."""
        s = store.Store(0, name="test")
        seen = []
        unsubscribe = s.subscribe(seen.append)
        unsubscribe()
        s.set(5)
        assert seen == [0]

    def test_failing_subscriber_does_not_block_others(self):
        """An exception in one subscriber is logged; others still run."""
        s = store.Store(0, name="test")
        seen = []

        def broken(_value):
            raise ValueError("boom")

        s.subscribe(broken)
        s.subscribe(seen.append)
        s.set(3)
        assert seen == [0, 3]
        assert s.get() == 3

    def test_reset_uses_fresh_value(self):
        """Reset restores the initial value without sharing mutable state."""
        s = store.Store([], name="test")
        s.get().append("x")
        s.reset()
        assert s.get() == []


class TestModuleStores:
    """Tests for the process-wide stores."""

    def test_initial_values(self):
        """Collections start empty and nothing is selected."""
        assert store.companies.get() == []
        assert store.esg_data.get() == []
        assert store.price_data.get() == []
        assert store.price_series.get() == {}
        assert store.selected_company.get() is None
        assert isinstance(store.filter_state.get(), FilterState)

    def test_reset_all(self):
        """reset_all clears every store."""
        store.companies.set(["placeholder"])
        store.price_series.set({"AAA": []})
        store.selected_company.set("AAA")
        store.reset_all()
        assert store.companies.get() == []
        assert store.price_series.get() == {}
        assert store.selected_company.get() is None
