"""
CSV parsing for the company/ESG metadata file and the wide-format price file.

Rows are tokenised with a small character-scan state machine so quoted
fields may contain commas and doubled-quote escapes. Header names are
normalised (lowercase, alphanumerics only) and matched against a fixed alias
table, which tolerates reordered or lightly renamed columns.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from esg_dashboard.data.errors import (
    DataLoadError,
    EmptyContentError,
    MissingHeaderError,
    NoValidRowsError,
    RowParseError,
)
from esg_dashboard.data.normalize import coerce_numeric, company_from_fields, normalize_symbol
from esg_dashboard.data.records import Company

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")
MAX_LOGGED_ROW_ERRORS = 20

COMPANY_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "symbol": ("symbol", "ticker", "tickersymbol"),
    "full_name": ("fullname", "name", "companyname", "longname", "shortname", "security"),
    "gics_sector": ("gicssector", "sector"),
    "gics_sub_industry": ("gicssubindustry", "subindustry"),
    "industry_code": ("industrycode",),
    "industry_name": ("industryname", "industry"),
    "data_availability": ("dataavailability", "availability"),
    "location": ("location", "headquarterslocation", "headquarters", "country"),
    "total_esg_score": ("totalesgscore", "totalesg", "esgscore", "totalscore", "totalesgriskscore"),
    "environmental_score": ("environmentalscore", "environmentscore", "envscore"),
    "environmental_mean": ("environmentalmean", "envmean"),
    "environmental_max": ("environmentalmax", "envmax"),
    "social_score": ("socialscore",),
    "social_mean": ("socialmean",),
    "social_max": ("socialmax",),
    "governance_score": ("governancescore", "govscore"),
    "governance_mean": ("governancemean", "govmean"),
    "governance_max": ("governancemax", "govmax"),
    "percentile": ("percentile", "esgpercentile"),
    "rating_year": ("ratingyear",),
    "rating_month": ("ratingmonth",),
    "market_cap": ("marketcap", "marketcapitalization"),
    "beta": ("beta",),
    "overall_risk": ("overallrisk",),
}

REQUIRED_COMPANY_FIELDS: Tuple[str, ...] = ("symbol",)

# Column layout of processed_sp500_esg_data.csv, used when the file has no header row.
COMPANY_COLUMN_ORDER: Tuple[str, ...] = (
    "symbol",
    "full_name",
    "gics_sector",
    "gics_sub_industry",
    "industry_code",
    "industry_name",
    "data_availability",
    "location",
    "total_esg_score",
    "environmental_score",
    "environmental_mean",
    "environmental_max",
    "social_score",
    "social_mean",
    "social_max",
    "governance_score",
    "governance_mean",
    "governance_max",
    "percentile",
    "rating_year",
    "rating_month",
    "market_cap",
    "beta",
)

DATE_HEADER_ALIASES: Tuple[str, ...] = ("date", "datetime", "timestamp", "day")


@dataclass
class ParseReport:
    """Aggregated parse diagnostics; never raised to the caller."""

    kind: str
    source_rows: int = 0
    parsed_rows: int = 0
    skipped_rows: int = 0
    duplicate_rows: int = 0
    header_map: Dict[str, int] = field(default_factory=dict)
    missing_fields: List[str] = field(default_factory=list)
    row_errors: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def record_row_error(self, exc: RowParseError) -> None:
        self.skipped_rows += 1
        if len(self.row_errors) < MAX_LOGGED_ROW_ERRORS:
            self.row_errors.append(str(exc))
        logger.warning("Skipping %s row: %s", self.kind, exc)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class ParseResult:
    records: List[Company]
    report: ParseReport


def normalize_header(text: str) -> str:
    return _NON_ALNUM.sub("", str(text).strip().lower())


def build_header_map(
    header_fields: Sequence[str],
    aliases: Mapping[str, Sequence[str]] = COMPANY_FIELD_ALIASES,
) -> Dict[str, int]:
    """Map canonical field names to column indexes; the first matching column wins."""
    normalized = [normalize_header(h) for h in header_fields]
    mapping: Dict[str, int] = {}
    for canonical, names in aliases.items():
        for name in names:
            if name in normalized:
                mapping[canonical] = normalized.index(name)
                break
    return mapping


def _scan_fields(line: str, delimiter: str = ",") -> Tuple[List[str], bool]:
    # A quote opens a quoted section only at the start of a field; anywhere
    # else it is a literal character. Returns (fields, still_inside_quotes).
    fields: List[str] = []
    buf: List[str] = []
    in_quotes = False
    field_started = False
    i = 0
    length = len(line)
    while i < length:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < length and line[i + 1] == '"':
                    buf.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                buf.append(ch)
        elif ch == delimiter:
            fields.append("".join(buf).strip())
            buf = []
            field_started = False
        elif ch == '"' and not field_started:
            buf = []
            in_quotes = True
            field_started = True
        else:
            buf.append(ch)
            if not ch.isspace():
                field_started = True
        i += 1
    fields.append("".join(buf).strip())
    return fields, in_quotes


def split_csv_line(line: str, delimiter: str = ",", line_number: int = 0) -> List[str]:
    """Split one CSV record into trimmed fields, honouring quotes and ``""`` escapes.

    Only a quote at the start of a field (after leading blanks) opens a quoted
    section, so ``The 12" Company`` stays a plain field.
    """
    fields, unterminated = _scan_fields(line, delimiter)
    if unterminated:
        raise RowParseError(line_number, "unterminated quoted field")
    return fields


def iter_logical_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line_number, record_text), joining physical lines inside an open quote.

    Blank lines outside quotes are skipped. Line numbers are 1-based and refer
    to the first physical line of each record.
    """
    pending: List[str] = []
    start = 0
    for number, raw in enumerate(text.lstrip("\ufeff").splitlines(), start=1):
        if not pending:
            if not raw.strip():
                continue
            start = number
        pending.append(raw)
        joined = "\n".join(pending)
        if not _scan_fields(joined)[1]:
            yield start, joined
            pending = []
    if pending:
        yield start, "\n".join(pending)


def _tokenize(text: str, kind: str) -> Iterator[Tuple[int, List[str] | RowParseError]]:
    if text is None or not str(text).strip():
        raise EmptyContentError(f"{kind} CSV text is empty")
    for number, line in iter_logical_lines(str(text)):
        try:
            yield number, split_csv_line(line, line_number=number)
        except RowParseError as exc:
            yield number, exc


def _row_fields(
    values: List[str],
    header_map: Mapping[str, int],
    width: int,
    line_number: int,
) -> Dict[str, str]:
    if len(values) > width and any(v for v in values[width:]):
        raise RowParseError(line_number, f"expected {width} fields, found {len(values)}")
    return {name: values[idx] if idx < len(values) else "" for name, idx in header_map.items()}


def _parse_company_rows(text: str, has_header: bool, report: ParseReport) -> List[Company]:
    rows = _tokenize(text, "company")
    if has_header:
        first = next(rows, None)
        if first is None:
            raise EmptyContentError("company CSV has no rows")
        _, header = first
        if isinstance(header, RowParseError):
            raise MissingHeaderError(list(REQUIRED_COMPANY_FIELDS))
        header_map = build_header_map(header)
        width = len(header)
    else:
        header_map = {name: idx for idx, name in enumerate(COMPANY_COLUMN_ORDER)}
        width = len(COMPANY_COLUMN_ORDER)

    missing_required = [f for f in REQUIRED_COMPANY_FIELDS if f not in header_map]
    if missing_required:
        raise MissingHeaderError(missing_required)
    report.header_map = dict(header_map)
    report.missing_fields = [f for f in COMPANY_FIELD_ALIASES if f not in header_map]

    companies: List[Company] = []
    seen: set[str] = set()
    for line_number, values in rows:
        report.source_rows += 1
        try:
            if isinstance(values, RowParseError):
                raise values
            fields = _row_fields(values, header_map, width, line_number)
            if not normalize_symbol(fields.get("symbol")):
                raise RowParseError(line_number, "blank symbol")
            company = company_from_fields(fields)
        except RowParseError as exc:
            report.record_row_error(exc)
            continue
        if company.symbol in seen:
            report.duplicate_rows += 1
            logger.warning("Duplicate symbol %s on line %d ignored", company.symbol, line_number)
            continue
        seen.add(company.symbol)
        companies.append(company)

    if not companies:
        raise NoValidRowsError(f"company CSV produced no valid rows ({report.source_rows} read)")
    report.parsed_rows = len(companies)
    return companies


def parse_company_csv(text: str, has_header: bool = True) -> ParseResult:
    """Parse the company/ESG metadata CSV into `Company` records.

    Malformed rows are logged and dropped. On total failure (empty text, no
    data rows, missing ``symbol`` header, every row malformed) the error is
    logged and an empty record list is returned.
    """
    report = ParseReport(kind="company")
    try:
        companies = _parse_company_rows(text, has_header, report)
    except DataLoadError as exc:
        report.error = str(exc)
        logger.error("Company CSV parse failed: %s", exc)
        return ParseResult([], report)
    logger.info(
        "Parsed %d companies (%d skipped, %d duplicates)",
        report.parsed_rows,
        report.skipped_rows,
        report.duplicate_rows,
    )
    return ParseResult(companies, report)


def _date_column_index(header: Sequence[str]) -> int:
    normalized = [normalize_header(h) for h in header]
    for alias in DATE_HEADER_ALIASES:
        if alias in normalized:
            return normalized.index(alias)
    return 0


def _parse_price_rows(text: str, report: ParseReport) -> pd.DataFrame:
    rows = _tokenize(text, "price")
    first = next(rows, None)
    if first is None:
        raise EmptyContentError("price CSV has no rows")
    _, header = first
    if isinstance(header, RowParseError):
        raise MissingHeaderError(["date"])
    date_idx = _date_column_index(header)
    tickers: List[Tuple[int, str]] = []
    seen = {"date"}
    for idx, name in enumerate(header):
        if idx == date_idx or not name:
            continue
        if name in seen:
            logger.warning("Duplicate price column %s at position %d ignored", name, idx + 1)
            continue
        seen.add(name)
        tickers.append((idx, name))
    if not tickers:
        raise MissingHeaderError(["<ticker columns>"])
    report.header_map = {name: idx for idx, name in tickers}
    width = len(header)

    dates: List[str] = []
    cells: List[List[str]] = []
    for line_number, values in rows:
        report.source_rows += 1
        try:
            if isinstance(values, RowParseError):
                raise values
            if len(values) > width and any(v for v in values[width:]):
                raise RowParseError(line_number, f"expected {width} fields, found {len(values)}")
            if date_idx >= len(values) or not values[date_idx]:
                raise RowParseError(line_number, "blank date")
        except RowParseError as exc:
            report.record_row_error(exc)
            continue
        dates.append(values[date_idx])
        cells.append([values[idx] if idx < len(values) else "" for idx, _ in tickers])

    frame = pd.DataFrame(cells, columns=[name for _, name in tickers], dtype=object)
    for column in frame.columns:
        frame[column] = coerce_numeric(frame[column])
    parsed_dates = pd.to_datetime(pd.Series(dates, dtype=object), errors="coerce", utc=True, format="mixed")
    parsed_dates = parsed_dates.dt.tz_convert(None)
    bad_dates = parsed_dates.isna()
    if bad_dates.any():
        for raw in pd.Series(dates)[bad_dates].head(MAX_LOGGED_ROW_ERRORS):
            report.row_errors.append(f"unparsable date {raw!r}")
        report.skipped_rows += int(bad_dates.sum())
        logger.warning("Dropping %d price rows with unparsable dates", int(bad_dates.sum()))
    frame.insert(0, "date", parsed_dates.dt.normalize())
    frame = frame[~bad_dates.to_numpy()].sort_values("date", kind="stable").reset_index(drop=True)

    if frame.empty:
        raise NoValidRowsError(f"price CSV produced no valid rows ({report.source_rows} read)")
    report.parsed_rows = len(frame)
    return frame


def parse_price_csv(text: str) -> Tuple[pd.DataFrame, ParseReport]:
    """Parse the wide-format price CSV into a frame of ``date`` plus one column per ticker.

    Prices that are blank or non-numeric become NaN. Total failure is logged
    and yields an empty frame.
    """
    report = ParseReport(kind="price")
    try:
        frame = _parse_price_rows(text, report)
    except DataLoadError as exc:
        report.error = str(exc)
        logger.error("Price CSV parse failed: %s", exc)
        return pd.DataFrame(columns=["date"]), report
    frame.attrs["diagnostics"] = report.to_dict()
    logger.info(
        "Parsed %d price rows for %d tickers (%d skipped)",
        report.parsed_rows,
        len(frame.columns) - 1,
        report.skipped_rows,
    )
    return frame, report
