"""Local persistence for canonical candle series."""

from src.storage.candle_store import (
    LoadedSeries,
    load_series,
    save_series,
    series_filename,
    series_path,
    series_period,
)

__all__ = [
    "LoadedSeries",
    "load_series",
    "save_series",
    "series_filename",
    "series_path",
    "series_period",
]
