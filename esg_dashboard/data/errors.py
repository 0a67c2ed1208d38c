"""
Exception types raised while fetching and parsing dashboard datasets.

Loaders catch everything derived from `DataLoadError` at the top level and
degrade to an empty store; only `RowParseError` is handled inside the parser.
"""

from __future__ import annotations


class DataLoadError(RuntimeError):
    """Base class for dataset loading failures."""


class FetchError(DataLoadError):
    """The CSV resource could not be retrieved (HTTP status, network, missing file)."""

    def __init__(self, source: str, reason: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"Failed to fetch {source}: {reason}")


class EmptyContentError(DataLoadError):
    """The resource was retrieved but contained no text."""


class MissingHeaderError(DataLoadError):
    """A required column is absent from the header row."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required header(s): {', '.join(missing)}")


class NoValidRowsError(DataLoadError):
    """The header parsed but not a single data row survived."""


class RowParseError(DataLoadError):
    """A single row could not be tokenised or converted."""

    def __init__(self, line_number: int, reason: str):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: {reason}")


class SymbolNotFoundError(KeyError, DataLoadError):
    """The requested ticker is not a column of the wide-format price table."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(symbol)

    def __str__(self) -> str:
        return f"Symbol not found in price data: {self.symbol}"
