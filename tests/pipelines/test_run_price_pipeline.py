"""Tests for the price pipeline runner (fetch → normalize → persist)."""

import json
import logging
from unittest.mock import Mock

import pytest

from src.ingestion.collectors.twelve_data_collector import (
    FetchOptions,
    TwelveDataCollector,
    TwelveDataError,
)
from src.ingestion.preprocessors.candle_normalizer import CandleParseError
from src.ingestion.schema import TimeSeriesResponse
from src.pipelines.price.run_price_pipeline import run


@pytest.fixture
def options() -> FetchOptions:
    return FetchOptions(symbol="USD/JPY", interval="1h")


def _collector(payload) -> Mock:
    collector = Mock(spec=TwelveDataCollector)
    collector.fetch.return_value = TimeSeriesResponse.from_payload(payload)
    return collector


class TestRun:
    def test_writes_ascending_series(self, tmp_path, options, raw_payload):
        result = run(options=options, data_dir=tmp_path, collector=_collector(raw_payload))

        assert result.path == tmp_path / "USD_JPY_1h.json"
        assert result.symbol == "USD/JPY"
        assert result.interval == "1h"
        assert len(result.candles) == 3

        document = json.loads(result.path.read_text(encoding="utf-8"))
        times = [v["time"] for v in document["values"]]
        assert times == sorted(times)
        assert document["meta"]["currency_quote"] == "Japanese Yen"

    def test_empty_response_still_written(self, tmp_path, options, empty_payload, caplog):
        with caplog.at_level(logging.WARNING):
            result = run(options=options, data_dir=tmp_path, collector=_collector(empty_payload))

        assert result.candles == []
        assert json.loads(result.path.read_text())["values"] == []
        assert "No data returned" in caplog.text

    def test_fetch_error_propagates(self, tmp_path, options):
        collector = Mock(spec=TwelveDataCollector)
        collector.fetch.side_effect = TwelveDataError("API Error: bad symbol")

        with pytest.raises(TwelveDataError):
            run(options=options, data_dir=tmp_path, collector=collector)

        assert not (tmp_path / "USD_JPY_1h.json").exists()

    def test_strict_rejects_bad_record(self, tmp_path, options, raw_payload):
        raw_payload["values"][1]["close"] = "n/a"

        with pytest.raises(CandleParseError):
            run(options=options, data_dir=tmp_path, strict=True, collector=_collector(raw_payload))

    def test_permissive_keeps_bad_record_as_null(self, tmp_path, options, raw_payload):
        raw_payload["values"][1]["close"] = "n/a"

        result = run(options=options, data_dir=tmp_path, collector=_collector(raw_payload))

        document = json.loads(result.path.read_text())
        assert document["values"][1]["close"] is None

    def test_strict_rejects_inconsistent_ohlc(self, tmp_path, options, raw_payload):
        raw_payload["values"][0]["high"] = "100.00"

        with pytest.raises(ValueError, match="OHLC consistency"):
            run(options=options, data_dir=tmp_path, strict=True, collector=_collector(raw_payload))

    def test_save_raw(self, tmp_path, options, raw_payload):
        collector = _collector(raw_payload)

        run(options=options, data_dir=tmp_path, save_raw=True, collector=collector)

        collector.export_raw.assert_called_once()
        assert collector.export_raw.call_args.args[1] == "USD_JPY_1h"

    def test_filename_uses_requested_symbol(self, tmp_path, raw_payload):
        options = FetchOptions(symbol="USD/JPY", interval="1day")

        result = run(options=options, data_dir=tmp_path, collector=_collector(raw_payload))

        assert result.path.name == "USD_JPY_1day.json"
        assert result.interval == "1h"
