"""Shared fixtures for the dashboard tests."""

import pytest

from esg_dashboard.data import store

COMPANY_CSV = """symbol,full_name,GICS Sector,GICS Sub-Industry,industry_code,industry_name,data_availability,location,total_esg_score,environmental_score,environmental_mean,environmental_max,social_score,social_mean,social_max,governance_score,governance_mean,governance_max,percentile,rating_year,rating_month,market_cap,beta
AAPL,Apple Inc.,Information Technology,Technology Hardware,TECH,Technology Hardware,Available,"Cupertino, California",17.2,0.6,2.1,6.0,7.9,8.5,13.0,8.7,6.9,12.1,15.0,2023,9,"2,500",1.29
MSFT,Microsoft Corp,Information Technology,Systems Software,SOFT,Software & Services,Available,"Redmond, Washington",15.0,0.3,1.4,5.2,9.5,8.1,12.4,5.2,5.9,11.0,8.0,2023,10,2400000000000,0.9
XOM,Exxon Mobil,Energy,Integrated Oil & Gas,OIL,Oil & Gas Producers,Available,"Irving, Texas",41.6,19.2,16.0,24.5,9.6,9.1,13.4,12.8,8.0,13.7,79.0,2023,8,420000000000,0.86
"""

PRICE_CSV = """Date,AAPL,MSFT,BRK-B
2024-01-02,185.64,370.87,357.57
2024-01-03,184.25,,356.88
2024-01-04,181.91,367.94,abc
2024-01-05,181.18,367.75,360.31
"""


@pytest.fixture(autouse=True)
def reset_stores():
    """Every test starts from empty process-wide stores."""
    store.reset_all()
    yield
    store.reset_all()


@pytest.fixture
def company_csv():
    return COMPANY_CSV


@pytest.fixture
def price_csv():
    return PRICE_CSV


@pytest.fixture
def fake_fetcher():
    """Fetcher that serves fixed text per source name."""
    sources = {"companies.csv": COMPANY_CSV, "prices.csv": PRICE_CSV}

    def fetch(source):
        return sources[source]

    fetch.sources = sources
    return fetch
