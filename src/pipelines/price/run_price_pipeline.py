"""
Price Data Pipeline Runner
Twelve Data → canonical candles → data/<SYMBOL>_<INTERVAL>.json
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from src.ingestion.collectors.twelve_data_collector import FetchOptions, TwelveDataCollector
from src.ingestion.preprocessors.candle_normalizer import CandleNormalizer
from src.ingestion.schema import Candle
from src.shared.utils import setup_logger
from src.storage.candle_store import save_series


@dataclass(frozen=True)
class PipelineResult:
    """What one pipeline run wrote."""

    path: Path
    candles: list[Candle]
    symbol: str
    interval: str


# -----------------------------
# Pipeline Runner
# -----------------------------

def run(
    options: FetchOptions | None = None,
    api_key: str | None = None,
    data_dir: Path | None = None,
    strict: bool = False,
    save_raw: bool = False,
    collector: TwelveDataCollector | None = None,
    logger: logging.Logger | None = None,
) -> PipelineResult:
    """
    Fetch one series, normalize it and replace its JSON artifact.

    An empty provider response still writes an (empty) artifact.

    Raises:
        TwelveDataError: fetch failed or the API reported an error
        CandleParseError: a record could not be normalized
        ValueError: strict mode and the series failed validation
    """

    logger = logger or setup_logger("run_price_pipeline")
    options = options or FetchOptions.from_config()
    collector = collector or TwelveDataCollector(api_key=api_key, options=options)

    response = collector.fetch(options)

    if not response.values:
        logger.warning("Warning: No data returned from API")
    elif save_raw:
        collector.export_raw(response, options.dataset_name)

    normalizer = CandleNormalizer(strict=strict)
    candles = normalizer.preprocess(response)

    if candles:
        try:
            normalizer.validate(candles)
        except ValueError as exc:
            if strict:
                raise
            logger.warning("Series failed validation: %s", exc)

    path = save_series(candles, response.meta, options.symbol, options.interval, data_dir)

    return PipelineResult(
        path=path,
        candles=candles,
        symbol=response.symbol or options.symbol,
        interval=response.interval or options.interval,
    )
