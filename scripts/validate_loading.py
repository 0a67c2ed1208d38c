"""Quick validation script for the CSV loading pipeline.

Run with `python scripts/validate_loading.py [company_csv] [price_csv]` to
parse the configured sources and check that records and a sample price
series come out the other end.
"""

from __future__ import annotations

import sys

from esg_dashboard.config import Settings, configure_logging
from esg_dashboard.data import store
from esg_dashboard.data.loader import load_all, load_price_series


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    company_source = sys.argv[1] if len(sys.argv) > 1 else settings.esg_data_source
    price_source = sys.argv[2] if len(sys.argv) > 2 else settings.price_data_source

    companies, prices = load_all(company_source, price_source)
    if not companies:
        raise SystemExit(f"No companies parsed from {company_source}")
    if not prices:
        raise SystemExit(f"No price rows parsed from {price_source}")

    symbol = next((c.symbol for c in companies if c.symbol in prices[0].prices), companies[0].symbol)
    series = load_price_series(symbol, price_source)

    diagnostics = store.diagnostics.get()
    print("Companies:", len(companies), "| skipped rows:", diagnostics["companies"]["skipped_rows"])
    print("Price rows:", len(prices), "| skipped rows:", diagnostics["prices"]["skipped_rows"])
    print(f"{symbol}: {len(series)} price points")


if __name__ == "__main__":
    main()
