"""
Environment bootstrap shared by the Streamlit app and the scripts.

Streamlit secrets are copied into ``os.environ`` first (nested tables become
``TABLE_KEY``), then a local ``.env`` fills whatever is still unset. Neither
step overrides a variable that already exists, so the data source settings
(ESG_DATA_SOURCE, PRICE_DATA_SOURCE, ...) may live in any of the three places.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import streamlit as st
from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

_INVALID_ENV_CHARS = re.compile(r"[^A-Z0-9_]")
_bootstrapped = False


def env_key(*parts: str) -> str:
    return _INVALID_ENV_CHARS.sub("_", "_".join(parts).upper())


def flatten_secrets(secrets: Mapping[str, Any], prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[str, str]]:
    """Yield (ENV_KEY, value) pairs; nested mappings join their keys with ``_``."""
    for key, value in secrets.items():
        path = prefix + (str(key),)
        if isinstance(value, Mapping):
            yield from flatten_secrets(value, path)
        elif value is not None:
            yield env_key(*path), str(value)


def _streamlit_secrets() -> Dict[str, Any]:
    try:
        secrets = getattr(st, "secrets", None)
        if not secrets:
            return {}
        return secrets.to_dict()  # type: ignore[attr-defined]
    except Exception:
        # st.secrets raises when no secrets.toml exists (local runs, tests)
        return {}


def bridge_secrets(secrets: Optional[Mapping[str, Any]] = None) -> List[str]:
    """Copy secrets into the environment without overriding; return the keys that were set."""
    source = _streamlit_secrets() if secrets is None else secrets
    added = []
    for key, value in flatten_secrets(source):
        if key not in os.environ:
            os.environ[key] = value
            added.append(key)
    if added:
        logger.debug("Bridged %d secrets into the environment", len(added))
    return added


def ensure_env(force: bool = False) -> None:
    """Bridge secrets and load ``.env`` once per process; `force` repeats both steps."""
    global _bootstrapped
    if _bootstrapped and not force:
        return
    bridge_secrets()
    load_dotenv(find_dotenv(usecwd=True), override=False)
    _bootstrapped = True


ensure_env()
