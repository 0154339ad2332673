"""
Root pytest configuration.

Shared Twelve Data payload fixtures. Raw values are newest-first, as the
provider delivers them.
"""

import copy

import pytest

META = {
    "symbol": "USD/JPY",
    "interval": "1h",
    "currency_base": "US Dollar",
    "currency_quote": "Japanese Yen",
    "type": "Physical Currency",
    "exchange": "FX",
}

RAW_VALUES = [
    {
        "datetime": "2024-01-01 12:00:00",
        "open": "150.40",
        "high": "150.80",
        "low": "150.30",
        "close": "150.70",
        "volume": "1200",
    },
    {
        "datetime": "2024-01-01 11:00:00",
        "open": "150.20",
        "high": "150.60",
        "low": "150.10",
        "close": "150.40",
        "volume": "1100",
    },
    {
        "datetime": "2024-01-01 10:00:00",
        "open": "150.00",
        "high": "150.50",
        "low": "149.90",
        "close": "150.20",
        "volume": "1000",
    },
]


@pytest.fixture
def raw_meta() -> dict:
    return copy.deepcopy(META)


@pytest.fixture
def raw_payload() -> dict:
    """A successful time_series payload with three hourly candles."""
    return {"meta": copy.deepcopy(META), "values": copy.deepcopy(RAW_VALUES), "status": "ok"}


@pytest.fixture
def empty_payload() -> dict:
    return {"meta": copy.deepcopy(META), "values": [], "status": "ok"}
