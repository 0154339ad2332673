"""Series statistics for the chart page header.

Works on a canonical (oldest-first) candle series and reports the latest
close, its change against the previous bar, the overall range and the mean
volume.
"""

from dataclasses import dataclass
from typing import Any, Sequence

from src.ingestion.schema import Candle, candles_to_frame


@dataclass(frozen=True)
class SeriesStats:
    """Summary of a candle series.

    ``change_percent`` is a display string with two decimals.
    """

    current: float
    change: float
    change_percent: str
    is_positive: bool
    high: float
    low: float
    avg_volume: float
    data_points: int

    def to_dict(self) -> dict[str, Any]:
        """camelCase mapping used by the page template."""
        return {
            "current": self.current,
            "change": self.change,
            "changePercent": self.change_percent,
            "isPositive": self.is_positive,
            "high": self.high,
            "low": self.low,
            "avgVolume": self.avg_volume,
            "dataPoints": self.data_points,
        }


def compute_series_stats(candles: Sequence[Candle]) -> SeriesStats | None:
    """Summarize an ascending candle series.

    Current and change come from the last two candles with finite prices,
    the same bars the chart draws; NaN placeholders are skipped. A single
    such candle is compared with itself, so its change is zero.

    Returns:
        SeriesStats, or None for an empty series or one without any fully
        priced candle.
    """
    priced = [c for c in candles if c.is_finite]
    if not priced:
        return None

    latest = priced[-1]
    previous = priced[-2] if len(priced) > 1 else latest

    change = latest.close - previous.close
    if previous.close:
        change_percent = f"{change / previous.close * 100:.2f}"
    else:
        change_percent = "0.00"

    df = candles_to_frame(candles)
    volumes = df["volume"].dropna()
    avg_volume = float(volumes.mean()) if not volumes.empty else 0.0

    return SeriesStats(
        current=latest.close,
        change=change,
        change_percent=change_percent,
        is_positive=change >= 0,
        high=float(df["high"].max()),
        low=float(df["low"].min()),
        avg_volume=avg_volume,
        data_points=len(candles),
    )
