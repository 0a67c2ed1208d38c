"""
Fetch the static CSV resources and publish parsed records to the stores.

Every public `load_*` function degrades instead of raising: network, empty
content and zero-row failures are logged and the target store is set to an
empty collection. Loads always replace store content, never append.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

import requests
import streamlit as st

from esg_dashboard.config import Settings
from esg_dashboard.data import store
from esg_dashboard.data.csv_parser import ParseReport, parse_company_csv, parse_price_csv
from esg_dashboard.data.errors import DataLoadError, EmptyContentError, FetchError, SymbolNotFoundError
from esg_dashboard.data.prices import extract_price_series, frame_to_records
from esg_dashboard.data.records import Company, PriceData, PricePoint

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CACHE_TTL_SECONDS = 600

Fetcher = Callable[[str], str]

# Failures a single load may hit; anything else is a programming error and propagates.
LOAD_ERRORS = (DataLoadError, requests.RequestException, OSError, UnicodeDecodeError)


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def _resolve_path(source: str) -> Path:
    path = Path(source).expanduser()
    if not path.is_absolute() and not path.exists():
        candidate = PROJECT_ROOT / path
        if candidate.exists():
            return candidate
    return path


def fetch_csv_text(source: str, timeout: Optional[float] = None) -> str:
    """Return the CSV text at `source` (http(s) URL or local path).

    Raises `FetchError` for a non-OK status, network failure or unreadable
    file, and `EmptyContentError` when the body is blank.
    """
    if _is_url(source):
        try:
            response = requests.get(source, timeout=timeout or Settings.from_env().request_timeout)
        except requests.RequestException as exc:
            raise FetchError(source, str(exc)) from exc
        if not response.ok:
            raise FetchError(source, f"HTTP error! status: {response.status_code}", response.status_code)
        text = response.content.decode("utf-8-sig", errors="replace")
    else:
        path = _resolve_path(source)
        try:
            text = path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            raise FetchError(source, str(exc)) from exc

    if not text.strip():
        raise EmptyContentError(f"{source} returned no content")
    return text


@st.cache_data(show_spinner=False, ttl=CACHE_TTL_SECONDS)
def cached_fetch_csv_text(source: str) -> str:
    """Cached `fetch_csv_text` for the Streamlit app; keyed by source."""
    return fetch_csv_text(source)


def _record_diagnostics(key: str, report: ParseReport, source: str) -> None:
    entry = report.to_dict()
    entry["source"] = source
    store.diagnostics.update(lambda current: {**current, key: entry})


def load_company_data(source: Optional[str] = None, fetcher: Fetcher = fetch_csv_text) -> List[Company]:
    """Fetch and parse the company/ESG file into the `companies` and `esg_data` stores."""
    source = source or Settings.from_env().esg_data_source
    try:
        text = fetcher(source)
        result = parse_company_csv(text)
        records, report = result.records, result.report
    except LOAD_ERRORS as exc:
        logger.error("Error loading company data from %s: %s", source, exc)
        records, report = [], ParseReport(kind="company", error=str(exc))

    store.companies.set(records)
    store.esg_data.set([c.to_flat() for c in records])
    _record_diagnostics("companies", report, source)
    if records:
        logger.info("Loaded %d companies from %s", len(records), source)
    return records


def load_price_data(source: Optional[str] = None, fetcher: Fetcher = fetch_csv_text) -> List[PriceData]:
    """Fetch and parse the wide-format price file into the `price_data` store."""
    source = source or Settings.from_env().price_data_source
    try:
        text = fetcher(source)
        frame, report = parse_price_csv(text)
        records = frame_to_records(frame)
    except LOAD_ERRORS as exc:
        logger.error("Error loading price data from %s: %s", source, exc)
        records, report = [], ParseReport(kind="price", error=str(exc))

    store.price_data.set(records)
    _record_diagnostics("prices", report, source)
    if records:
        logger.info("Loaded %d price rows from %s", len(records), source)
    return records


def load_price_series(
    symbol: str,
    source: Optional[str] = None,
    fetcher: Fetcher = fetch_csv_text,
) -> List[PricePoint]:
    """Fetch the price file and store the series for `symbol` under `price_series[symbol]`.

    A symbol missing from the price headers stores an empty series and logs a
    warning instead of raising.
    """
    source = source or Settings.from_env().price_data_source
    points: List[PricePoint] = []
    try:
        text = fetcher(source)
        frame, _ = parse_price_csv(text)
        points = extract_price_series(frame, symbol)
    except SymbolNotFoundError as exc:
        logger.warning("%s (source %s)", exc, source)
    except LOAD_ERRORS as exc:
        logger.error("Error loading price series for %s from %s: %s", symbol, source, exc)

    store.price_series.update(lambda current: {**current, symbol: points})
    return points


def load_all(
    company_source: Optional[str] = None,
    price_source: Optional[str] = None,
    fetcher: Fetcher = fetch_csv_text,
) -> Tuple[List[Company], List[PriceData]]:
    """Load companies, then prices; one sequential attempt each."""
    companies = load_company_data(company_source, fetcher=fetcher)
    prices = load_price_data(price_source, fetcher=fetcher)
    return companies, prices
