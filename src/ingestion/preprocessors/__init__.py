"""Preprocessors turning raw provider payloads into canonical candles."""

from src.ingestion.preprocessors.candle_normalizer import (
    CandleNormalizer,
    CandleParseError,
    ProviderOrderError,
    transform_candle_data,
)

__all__ = [
    "CandleNormalizer",
    "CandleParseError",
    "ProviderOrderError",
    "transform_candle_data",
]
