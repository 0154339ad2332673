"""Candle normalizer: Twelve Data records → canonical ascending series.

Twelve Data returns ``time_series`` values newest-first with every field
encoded as a string:

    {"datetime": "2024-01-01 10:00:00", "open": "150.00", "high": "150.50",
     "low": "149.90", "close": "150.20", "volume": "1000"}

The canonical form is a list of :class:`~src.ingestion.schema.Candle`,
oldest-first, with ``time`` in Unix epoch seconds (UTC) and numeric prices.

Ordering:
    The provider contract is descending time, so the converted records are
    reversed. The result is then checked rather than trusted: a series that
    is not strictly ascending after reversal means the provider broke its
    contract. Strict mode raises ``ProviderOrderError``; permissive mode logs
    a warning and stable-sorts by ``time`` (duplicates are kept).

Field parsing:
    Each numeric field goes through :func:`parse_decimal`, which reports a
    :class:`~src.ingestion.schema.ParsedField` instead of raising. Permissive
    mode keeps a NaN sentinel for unparseable prices (with a warning) and
    ``None`` for a missing or unparseable volume. Strict mode rejects the
    record. An unparseable ``datetime`` is always an error.
"""

import logging
import math
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from src.ingestion.schema import (
    PRICE_FIELDS,
    Candle,
    ParsedField,
    RawCandle,
    TimeSeriesResponse,
    candles_to_frame,
)
from src.shared.utils import epoch_seconds, setup_logger

logger = setup_logger(__name__)

DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d")

MISSING = "missing"

# Optional sign, digits with an optional fraction, optional exponent
DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class CandleParseError(ValueError):
    """A raw candle could not be converted to canonical form."""


class ProviderOrderError(CandleParseError):
    """Raw candles were not delivered in strictly descending time order."""


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_decimal(raw: Any) -> ParsedField:
    """Parse a provider decimal string.

    Returns:
        ParsedField with ``value`` set on success, or ``error`` describing
        why the input was rejected (``"missing"`` for None/empty input).
    """
    if raw is None or isinstance(raw, bool):
        return ParsedField(error=MISSING if raw is None else f"not a number: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return ParsedField(error=MISSING)
        if not DECIMAL_RE.fullmatch(text):
            return ParsedField(error=f"not a number: {raw!r}")
        value = float(text)
    if not math.isfinite(value):
        return ParsedField(error=f"not a finite number: {raw!r}")
    return ParsedField(value=value)


def parse_timestamp(raw: Any) -> int:
    """Convert a provider ``datetime`` string to Unix epoch seconds.

    Naive timestamps are read as UTC. Sub-second precision is truncated.

    Raises:
        CandleParseError: If the value is missing or in an unknown format.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise CandleParseError(f"datetime is missing or not a string: {raw!r}")

    text = raw.strip()
    for fmt in DATETIME_FORMATS:
        try:
            return epoch_seconds(datetime.strptime(text, fmt))
        except ValueError:
            continue

    try:
        return epoch_seconds(datetime.fromisoformat(text))
    except ValueError:
        raise CandleParseError(f"Unparseable datetime: {raw!r}") from None


# ---------------------------------------------------------------------------
# Record / series conversion
# ---------------------------------------------------------------------------


def normalize_candle(
    raw: RawCandle,
    strict: bool = False,
    index: int | None = None,
    log: logging.Logger | None = None,
) -> Candle:
    """Convert one raw record to a :class:`Candle`.

    Args:
        raw: Raw Twelve Data record.
        strict: Reject the record on any unparseable numeric field.
        index: Position of the record in the provider payload (for messages).
        log: Logger for permissive-mode warnings (module logger by default).

    Raises:
        CandleParseError: Bad ``datetime``, or a bad field in strict mode.
    """
    where = "record" if index is None else f"record {index}"
    if not isinstance(raw, Mapping):
        raise CandleParseError(f"{where}: expected an object, got {type(raw).__name__}")

    try:
        time = parse_timestamp(raw.get("datetime"))
    except CandleParseError as exc:
        raise CandleParseError(f"{where}: {exc}") from None

    prices: dict[str, float] = {}
    for name in PRICE_FIELDS:
        parsed = parse_decimal(raw.get(name))
        if parsed.ok:
            prices[name] = parsed.value
            continue
        if strict:
            raise CandleParseError(f"{where}: {name} {parsed.error}")
        (log or logger).warning(
            "%s (%s): %s %s, keeping NaN", where, raw.get("datetime"), name, parsed.error
        )
        prices[name] = math.nan

    volume = parse_decimal(raw.get("volume"))
    if not volume.ok and strict and volume.error != MISSING:
        raise CandleParseError(f"{where}: volume {volume.error}")

    return Candle(time=time, volume=volume.value, **prices)


def is_strictly_ascending(candles: Sequence[Candle]) -> bool:
    """True when every candle is later than the one before it."""
    return all(prev.time < cur.time for prev, cur in zip(candles, candles[1:]))


def transform_candle_data(
    response: TimeSeriesResponse | Mapping[str, Any],
    strict: bool = False,
    log: logging.Logger | None = None,
) -> list[Candle]:
    """Normalize a provider payload into a canonical ascending series.

    Output length always equals input length. An empty ``values`` list gives
    an empty series. No deduplication or gap filling is performed.

    Args:
        response: ``TimeSeriesResponse`` or the raw JSON payload.
        strict: Reject malformed records and provider order violations.
        log: Logger for permissive-mode warnings (module logger by default).

    Raises:
        CandleParseError: A record could not be converted.
        ProviderOrderError: Strict mode only, input was not strictly descending.
    """
    if isinstance(response, TimeSeriesResponse):
        values: Iterable[RawCandle] = response.values
    else:
        values = response.get("values") or []

    log = log or logger
    candles = [
        normalize_candle(raw, strict=strict, index=i, log=log) for i, raw in enumerate(values)
    ]
    candles.reverse()

    if not is_strictly_ascending(candles):
        if strict:
            raise ProviderOrderError("Provider candles are not in strictly descending time order")
        log.warning(
            "Provider candles were not strictly descending; sorting %d records by time",
            len(candles),
        )
        candles.sort(key=lambda candle: candle.time)

    return candles


class CandleNormalizer:
    """Preprocessor wrapping :func:`transform_candle_data` with logging and checks.

    ``preprocess`` produces the canonical series; ``validate`` applies the
    hard gates a chart-ready series must pass (no NaN prices, OHLC
    consistency, strictly ascending time).
    """

    def __init__(self, strict: bool = False, log_file: Path | None = None) -> None:
        """Initialize the normalizer.

        Args:
            strict: Reject malformed records instead of keeping NaN sentinels.
            log_file: Optional path for file-based logging.
        """
        self.strict = strict
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def preprocess(self, response: TimeSeriesResponse | Mapping[str, Any]) -> list[Candle]:
        """Transform a provider payload into canonical candles."""
        candles = transform_candle_data(response, strict=self.strict, log=self.logger)
        self.logger.info("Normalized %d candles (strict=%s)", len(candles), self.strict)
        return candles

    def validate(self, candles: Sequence[Candle]) -> bool:
        """Validate that a canonical series is chart-ready.

        Checks:
        - At least one candle
        - No NaN prices
        - OHLC consistency (high >= open/close/low, low <= open/close/high)
        - Strictly ascending, unique ``time``

        Returns:
            True if valid.

        Raises:
            ValueError: If validation fails with details.
        """
        if not candles:
            raise ValueError("Candle series is empty")

        df = self.to_dataframe(candles)

        for name in PRICE_FIELDS:
            if df[name].isna().any():
                raise ValueError(f"Missing values found in '{name}'")

        high_valid = (
            (df["high"] >= df["open"]) & (df["high"] >= df["close"]) & (df["high"] >= df["low"])
        )
        low_valid = (
            (df["low"] <= df["open"]) & (df["low"] <= df["close"]) & (df["low"] <= df["high"])
        )

        if not high_valid.all():
            invalid_count = int((~high_valid).sum())
            raise ValueError(
                f"OHLC consistency violation: {invalid_count} records with invalid high prices"
            )

        if not low_valid.all():
            invalid_count = int((~low_valid).sum())
            raise ValueError(
                f"OHLC consistency violation: {invalid_count} records with invalid low prices"
            )

        if not (df["time"].is_monotonic_increasing and df["time"].is_unique):
            raise ValueError("Candle times are not strictly increasing")

        self.logger.info("Validation passed: %d records", len(df))
        return True

    @staticmethod
    def to_dataframe(candles: Sequence[Candle]) -> pd.DataFrame:
        """Canonical candles as a DataFrame with a ``timestamp_utc`` column."""
        return candles_to_frame(candles)
