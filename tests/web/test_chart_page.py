"""Tests for the static chart page renderer."""

import json
import math
import re

import pytest

from src.analytics.series_stats import compute_series_stats
from src.ingestion.preprocessors.candle_normalizer import transform_candle_data
from src.ingestion.schema import Candle
from src.web.chart_page import CHART_HEIGHT, chart_points, render_chart_page


@pytest.fixture
def candles() -> list[Candle]:
    return [
        Candle(time=1704103200, open=150.0, high=150.5, low=149.9, close=150.2, volume=1000.0),
        Candle(time=1704106800, open=150.2, high=150.6, low=150.1, close=150.4, volume=1100.0),
    ]


def _embedded_data(html: str) -> list:
    match = re.search(r"var data = (\[.*?\]);", html)
    assert match, "chart data not embedded"
    return json.loads(match.group(1))


class TestChartPoints:
    def test_keeps_epoch_seconds(self, candles):
        points = chart_points(candles)
        assert [p["time"] for p in points] == [1704103200, 1704106800]
        assert "volume" not in points[0]

    def test_skips_nan_prices(self, candles):
        broken = Candle(time=1704110400, open=math.nan, high=1.0, low=1.0, close=1.0)
        assert len(chart_points(candles + [broken])) == 2

    def test_duplicate_times_keep_last(self):
        first = Candle(time=1704103200, open=150.0, high=150.5, low=149.9, close=150.2)
        second = Candle(time=1704103200, open=150.0, high=150.5, low=149.9, close=150.3)

        points = chart_points([first, second])

        assert [p["time"] for p in points] == [1704103200]
        assert points[0]["close"] == pytest.approx(150.3)

    def test_duplicates_from_normalizer_are_unique(self, raw_payload):
        raw_payload["values"].append(dict(raw_payload["values"][-1]))

        times = [p["time"] for p in chart_points(transform_candle_data(raw_payload))]

        assert times == sorted(set(times))


class TestRenderChartPage:
    def test_renders_chart(self, candles):
        html = render_chart_page(candles, symbol="USD/JPY")

        assert html.startswith("<!DOCTYPE html>")
        assert '<div id="chart"></div>' in html
        assert "lightweight-charts" in html
        assert "USD/JPY" in html
        assert f"height: {CHART_HEIGHT}" in html
        assert "No data available" not in html
        assert _embedded_data(html) == chart_points(candles)

    def test_empty_series_shows_placeholder(self):
        html = render_chart_page([], symbol="USD/JPY")

        assert "No data available" in html
        assert '<div id="chart"></div>' not in html
        assert "<script" not in html

    def test_error_banner(self):
        html = render_chart_page([], symbol="USD/JPY", error="Data file not found: USD_JPY_1h.json.")

        assert 'role="alert"' in html
        assert "Data file not found" in html

    def test_escapes_text(self, candles):
        html = render_chart_page(candles, symbol="<b>X</b>", error="<script>alert(1)</script>")

        assert "<b>X</b>" not in html
        assert "&lt;b&gt;X&lt;/b&gt;" in html
        assert "<script>alert(1)</script>" not in html

    def test_stats_panel(self, candles):
        stats = compute_series_stats(candles)

        html = render_chart_page(candles, symbol="USD/JPY", stats=stats)

        assert 'class="stats"' in html
        assert "150.400" in html
        assert "+0.200 (+0.13%)" in html
        assert 'class="up"' in html

    def test_negative_change_styling(self, candles):
        stats = compute_series_stats(list(reversed(candles)))

        html = render_chart_page(candles, symbol="USD/JPY", stats=stats)

        assert "-0.200 (-0.13%)" in html
        assert 'class="down"' in html

    def test_markup_in_symbol_cannot_close_script(self, candles):
        html = render_chart_page(candles, symbol="</script><b>x</b>")

        assert html.count("</script>") == 2
        assert _embedded_data(html) == chart_points(candles)
