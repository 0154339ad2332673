"""Data ingestion module - collectors, preprocessors and the price schema."""

from src.ingestion.collectors import BaseCollector, FetchOptions, TwelveDataCollector
from src.ingestion.preprocessors import CandleNormalizer, transform_candle_data
from src.ingestion.schema import Candle, TimeSeriesResponse

__all__ = [
    "BaseCollector",
    "Candle",
    "CandleNormalizer",
    "FetchOptions",
    "TimeSeriesResponse",
    "TwelveDataCollector",
    "transform_candle_data",
]
