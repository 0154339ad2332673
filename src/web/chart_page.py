"""Static HTML page with an interactive candlestick chart.

The chart itself is drawn in the browser by TradingView lightweight-charts;
this module only embeds the canonical series as JSON and renders the page
template around it (title, error banner, summary figures, placeholder when
there is nothing to draw).
"""

from typing import Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from src.analytics.series_stats import SeriesStats
from src.ingestion.schema import Candle

LIGHTWEIGHT_CHARTS_URL = (
    "https://unpkg.com/lightweight-charts@4.2.0/dist/lightweight-charts.standalone.production.js"
)

CHART_HEIGHT = 500
UP_COLOR = "#26a69a"
DOWN_COLOR = "#ef5350"

TEMPLATE_NAME = "chart_page.html"

_env = Environment(
    loader=PackageLoader("src.web", "templates"),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
)


def chart_points(candles: Sequence[Candle]) -> list[dict]:
    """Chart series points in ascending time order.

    Candles with a non-finite price are left out. The chart needs unique
    times, so when several candles share a ``time`` the last one wins.
    """
    by_time: dict[int, dict] = {}
    for c in candles:
        if not c.is_finite:
            continue
        by_time[c.time] = {
            "time": c.time,
            "open": c.open,
            "high": c.high,
            "low": c.low,
            "close": c.close,
        }
    return [by_time[t] for t in sorted(by_time)]


def _stats_rows(stats: SeriesStats) -> list[tuple[str, str, str]]:
    direction = "up" if stats.is_positive else "down"
    sign = "+" if stats.is_positive else ""
    return [
        ("Current", f"{stats.current:,.3f}", ""),
        ("Change", f"{sign}{stats.change:,.3f} ({sign}{stats.change_percent}%)", direction),
        ("High", f"{stats.high:,.3f}", ""),
        ("Low", f"{stats.low:,.3f}", ""),
        ("Avg volume", f"{stats.avg_volume:,.0f}", ""),
        ("Data points", f"{stats.data_points:,}", ""),
    ]


def render_chart_page(
    candles: Sequence[Candle],
    symbol: str,
    stats: SeriesStats | None = None,
    error: str | None = None,
) -> str:
    """Render the full HTML document.

    Args:
        candles: Canonical ascending series (``time`` in epoch seconds).
        symbol: Instrument label shown above the chart.
        stats: Optional summary figures shown above the chart.
        error: Optional user-facing message shown as an error banner.

    Returns:
        HTML text. An empty series renders a "No data available" placeholder
        instead of an empty chart.
    """
    template = _env.get_template(TEMPLATE_NAME)
    return template.render(
        symbol=symbol,
        error=error,
        points=chart_points(candles),
        stats_rows=_stats_rows(stats) if stats is not None else [],
        library_url=LIGHTWEIGHT_CHARTS_URL,
        height=CHART_HEIGHT,
        up_color=UP_COLOR,
        down_color=DOWN_COLOR,
    )
