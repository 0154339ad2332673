"""Collectors package."""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.twelve_data_collector import (
    FetchOptions,
    TwelveDataCollector,
    TwelveDataError,
)

__all__ = ["BaseCollector", "FetchOptions", "TwelveDataCollector", "TwelveDataError"]
