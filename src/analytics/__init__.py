"""Summary figures derived from canonical candle series."""

from src.analytics.series_stats import SeriesStats, compute_series_stats

__all__ = ["SeriesStats", "compute_series_stats"]
