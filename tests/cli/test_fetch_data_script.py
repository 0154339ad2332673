"""Tests for the fetch_data command-line entry point."""

import logging
from datetime import date
from pathlib import Path

import pytest

from scripts import fetch_data
from src.ingestion.collectors.twelve_data_collector import FetchOptions, TwelveDataError
from src.ingestion.schema import Candle
from src.pipelines.price.run_price_pipeline import PipelineResult
from src.shared.config import Config


@pytest.fixture(autouse=True)
def env(monkeypatch):
    monkeypatch.setattr(Config, "TWELVE_DATA_API_KEY", "test-key")
    monkeypatch.setattr(Config, "SYMBOL", "USD/JPY")
    monkeypatch.setattr(Config, "INTERVAL", "1h")
    monkeypatch.setattr(Config, "START_DATE", None)
    monkeypatch.setattr(Config, "END_DATE", None)
    monkeypatch.setattr(Config, "OUTPUTSIZE", None)


def _argv(monkeypatch, *args):
    monkeypatch.setattr("sys.argv", ["fetch_data.py", *args])


def _result(tmp_path: Path) -> PipelineResult:
    return PipelineResult(
        path=tmp_path / "USD_JPY_1h.json",
        candles=[
            Candle(time=1704103200, open=150.0, high=150.5, low=149.9, close=150.2, volume=1000.0),
            Candle(time=1704189600, open=150.2, high=150.6, low=150.1, close=150.4, volume=1100.0),
        ],
        symbol="USD/JPY",
        interval="1h",
    )


class TestFetchDataMain:
    def test_success_returns_zero_and_logs_summary(self, monkeypatch, tmp_path, caplog):
        _argv(monkeypatch)
        monkeypatch.setattr(fetch_data, "run", lambda **kwargs: _result(tmp_path))

        with caplog.at_level(logging.INFO):
            assert fetch_data.main() == 0

        messages = [r.getMessage() for r in caplog.records if r.name == "fetch_data"]
        assert any("USD_JPY_1h.json" in m for m in messages)
        assert "  - Records: 2" in messages
        assert "  - Symbol: USD/JPY" in messages
        assert "  - Interval: 1h" in messages
        assert "  - Period: 2024-01-01 ~ 2024-01-02" in messages

    def test_fetch_error_returns_one(self, monkeypatch, caplog):
        _argv(monkeypatch)

        def failing_run(**kwargs):
            raise TwelveDataError("API Error: symbol not found")

        monkeypatch.setattr(fetch_data, "run", failing_run)

        with caplog.at_level(logging.ERROR):
            assert fetch_data.main() == 1

        assert any("symbol not found" in r.getMessage() for r in caplog.records)

    def test_missing_api_key_returns_one(self, monkeypatch, caplog):
        _argv(monkeypatch)
        monkeypatch.setattr(Config, "TWELVE_DATA_API_KEY", None)
        monkeypatch.setattr(fetch_data, "run", lambda **kwargs: pytest.fail("run called"))

        with caplog.at_level(logging.ERROR):
            assert fetch_data.main() == 1

        assert any("TWELVE_DATA_API_KEY" in r.getMessage() for r in caplog.records)

    def test_invalid_date_returns_one(self, monkeypatch):
        _argv(monkeypatch, "--start", "01/01/2024")
        monkeypatch.setattr(fetch_data, "run", lambda **kwargs: pytest.fail("run called"))

        assert fetch_data.main() == 1

    def test_interrupt_returns_130(self, monkeypatch):
        _argv(monkeypatch)

        def interrupted_run(**kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(fetch_data, "run", interrupted_run)

        assert fetch_data.main() == 130

    def test_cli_values_reach_run(self, monkeypatch, tmp_path):
        _argv(
            monkeypatch,
            "--symbol", "EUR/USD",
            "--interval", "1day",
            "--start", "2024-01-01",
            "--end", "2024-06-30",
            "--outputsize", "100",
            "--data-dir", str(tmp_path),
            "--strict",
        )
        calls = {}

        def recording_run(**kwargs):
            calls.update(kwargs)
            return _result(tmp_path)

        monkeypatch.setattr(fetch_data, "run", recording_run)

        assert fetch_data.main() == 0
        assert calls["options"] == FetchOptions(
            symbol="EUR/USD",
            interval="1day",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 6, 30),
            outputsize=100,
        )
        assert calls["data_dir"] == tmp_path
        assert calls["strict"] is True
        assert calls["save_raw"] is False
