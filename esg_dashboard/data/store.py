"""
Process-wide reactive state containers.

A `Store` holds one value and notifies subscribers whenever it is replaced.
Loaders replace a store's content wholesale with a single `set`, so readers
never observe a partially built collection.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from esg_dashboard.data.filters import FilterState, default_filter_state
from esg_dashboard.data.records import Company, PriceData, PricePoint

logger = logging.getLogger(__name__)

T = TypeVar("T")
Subscriber = Callable[[Any], None]


class Store(Generic[T]):
    def __init__(self, initial: T | Callable[[], T], name: str = "store"):
        self.name = name
        self._factory: Callable[[], T] = initial if callable(initial) else (lambda: copy.deepcopy(initial))
        self._value: T = self._factory()
        self._subscribers: List[Subscriber] = []

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        self._notify()

    def update(self, fn: Callable[[T], T]) -> None:
        self.set(fn(self._value))

    def reset(self) -> None:
        self.set(self._factory())

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register `callback`, call it with the current value, and return an unsubscribe function."""
        self._subscribers.append(callback)
        self._call(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            self._call(callback)

    def _call(self, callback: Subscriber) -> None:
        try:
            callback(self._value)
        except Exception:
            logger.exception("Subscriber of %s store failed", self.name)

    def __repr__(self) -> str:
        return f"Store(name={self.name!r}, subscribers={len(self._subscribers)})"


companies: Store[List[Company]] = Store(list, name="companies")
esg_data: Store[List[Dict[str, Any]]] = Store(list, name="esg_data")
price_data: Store[List[PriceData]] = Store(list, name="price_data")
price_series: Store[Dict[str, List[PricePoint]]] = Store(dict, name="price_series")
selected_company: Store[Optional[str]] = Store(lambda: None, name="selected_company")
filter_state: Store[FilterState] = Store(default_filter_state, name="filter_state")
diagnostics: Store[Dict[str, Dict[str, Any]]] = Store(dict, name="diagnostics")

ALL_STORES = (companies, esg_data, price_data, price_series, selected_company, filter_state, diagnostics)


def reset_all() -> None:
    for store in ALL_STORES:
        store.reset()
