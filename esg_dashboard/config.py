"""
Application-wide configuration constants and helper utilities.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import streamlit as st

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

DEFAULT_ESG_DATA_SOURCE = "data/processed_sp500_esg_data.csv"
DEFAULT_PRICE_DATA_SOURCE = "data/sp500_stock_prices.csv"


@dataclass(frozen=True)
class TabConfig:
    key: str
    label: str


# Ordered tab definitions for the dashboard
TABS: List[TabConfig] = [
    TabConfig("overview", "Overview"),
    TabConfig("companies", "Companies"),
    TabConfig("company_detail", "Company Detail"),
    TabConfig("price_history", "Price History"),
    TabConfig("data_quality", "Data Quality"),
]


def get_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Try env first, then st.secrets (if available)."""
    val = os.getenv(name)
    if val:
        return val
    try:
        sec = getattr(st, "secrets", None)
        if sec:
            v = sec.get(name)  # type: ignore[index]
            return str(v) if v is not None else default
    except Exception:
        # st.secrets raises when no secrets.toml exists outside Streamlit Cloud
        pass
    return default


def _get_float(name: str, default: float) -> float:
    raw = get_setting(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring non-numeric %s=%r", name, raw)
        return default


@dataclass(frozen=True)
class Settings:
    esg_data_source: str = DEFAULT_ESG_DATA_SOURCE
    price_data_source: str = DEFAULT_PRICE_DATA_SOURCE
    request_timeout: float = 15.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            esg_data_source=get_setting("ESG_DATA_SOURCE", DEFAULT_ESG_DATA_SOURCE) or DEFAULT_ESG_DATA_SOURCE,
            price_data_source=get_setting("PRICE_DATA_SOURCE", DEFAULT_PRICE_DATA_SOURCE) or DEFAULT_PRICE_DATA_SOURCE,
            request_timeout=_get_float("REQUEST_TIMEOUT", 15.0),
            log_level=(get_setting("LOG_LEVEL", "INFO") or "INFO").upper(),
        )


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger; repeat calls only adjust the level."""
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    if not any(getattr(h, "_esg_dashboard", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._esg_dashboard = True  # type: ignore[attr-defined]
        root.addHandler(handler)
