"""
JSON Candle Store
Persists canonical series as data/<SYMBOL>_<INTERVAL>.json

Document layout:
    {"meta": {...provider meta...}, "values": [{time, open, high, low, close, volume}, ...]}

Each fetch run replaces the whole file. Values are written oldest-first.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from src.ingestion.schema import Candle, dataset_id
from src.shared.config import Config
from src.shared.utils import setup_logger

logger = setup_logger(__name__)


# -----------------------------
# Naming
# -----------------------------

def series_filename(symbol: str, interval: str) -> str:
    """File name for a series, e.g. ``USD_JPY_1h.json``."""
    return f"{dataset_id(symbol, interval)}.json"


def series_path(symbol: str, interval: str, data_dir: Path | None = None) -> Path:
    return (data_dir or Config.DATA_DIR) / series_filename(symbol, interval)


# -----------------------------
# Write
# -----------------------------

def save_series(
    candles: Sequence[Candle],
    meta: Mapping[str, Any],
    symbol: str,
    interval: str,
    data_dir: Path | None = None,
) -> Path:
    """
    Write a canonical series, creating the data directory if needed.

    NaN prices are stored as null so the file stays strict JSON.
    """

    path = series_path(symbol, interval, data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    document = {
        "meta": dict(meta),
        "values": [candle.to_dict() for candle in candles],
    }

    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False, allow_nan=False)

    return path


def series_period(candles: Sequence[Candle]) -> tuple[datetime, datetime] | None:
    """
    UTC datetimes of the first and last candle, or None when empty.
    """

    if not candles:
        return None

    first = datetime.fromtimestamp(candles[0].time, tz=timezone.utc)
    last = datetime.fromtimestamp(candles[-1].time, tz=timezone.utc)
    return first, last


# -----------------------------
# Read
# -----------------------------

@dataclass(frozen=True)
class LoadedSeries:
    """
    Result of reading a series file for display.

    ``error`` holds a user-facing message; ``candles`` is then empty.
    """

    candles: list[Candle] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_series(path: Path) -> LoadedSeries:
    """
    Read a persisted series without raising on bad input.

    Missing file, empty ``values`` and unreadable content all come back
    as a LoadedSeries carrying an error message and no candles.
    """

    if not path.exists():
        return LoadedSeries(
            error=(
                f"Data file not found: {path.name}. "
                "Run scripts/fetch_data.py to download candles first."
            )
        )

    try:
        with open(path, encoding="utf-8") as f:
            document = json.load(f)

        if not isinstance(document, dict):
            raise ValueError("top-level JSON value is not an object")

        values = document.get("values") or []
        if not isinstance(values, list):
            raise ValueError("'values' is not an array")

        if not values:
            return LoadedSeries(
                meta=dict(document.get("meta") or {}),
                error="Data file exists but contains no data.",
            )

        candles = [Candle.from_dict(value) for value in values]
        meta = dict(document.get("meta") or {})

    except (OSError, ValueError, TypeError, KeyError) as exc:
        logger.error("Error reading data file %s: %s", path, exc)
        return LoadedSeries(error=f"Failed to read data file: {exc}")

    return LoadedSeries(candles=candles, meta=meta)
