"""Price data schema: raw Twelve Data payloads and canonical candles.

Raw records arrive string-typed and newest-first. Canonical candles are
numeric, keyed by Unix epoch seconds, and held oldest-first.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Sequence

import pandas as pd

# Fields every raw candle is expected to carry. ``volume`` may be empty or
# missing for some FX instruments.
RAW_CANDLE_FIELDS = ("datetime", "open", "high", "low", "close", "volume")
PRICE_FIELDS = ("open", "high", "low", "close")
CANDLE_COLUMNS = ["time", "open", "high", "low", "close", "volume"]

RawCandle = Mapping[str, Any]


@dataclass(frozen=True)
class TimeSeriesResponse:
    """A successful Twelve Data ``time_series`` payload.

    ``values`` is kept exactly as delivered (descending by time).
    """

    meta: dict[str, Any]
    values: Sequence[RawCandle]
    status: str = "ok"

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TimeSeriesResponse":
        values = payload.get("values")
        if not isinstance(values, list):
            raise ValueError("Invalid API response: values array not found")
        return cls(
            meta=dict(payload.get("meta") or {}),
            values=values,
            status=str(payload.get("status", "ok")),
        )

    @property
    def symbol(self) -> str | None:
        return self.meta.get("symbol")

    @property
    def interval(self) -> str | None:
        return self.meta.get("interval")


@dataclass(frozen=True)
class ParsedField:
    """Outcome of parsing one raw field: a value, or the reason it failed."""

    value: float | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Candle:
    """Canonical OHLCV bar.

    Attributes:
        time:   Unix timestamp (seconds, UTC).
        open:   Opening price.
        high:   Highest price during the bar.
        low:    Lowest price during the bar.
        close:  Closing price.
        volume: Traded volume, or None when the provider gave none.
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float | None = field(default=None)

    @property
    def is_finite(self) -> bool:
        """True when every price is a finite number."""
        return all(math.isfinite(getattr(self, name)) for name in PRICE_FIELDS)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe mapping; NaN prices become None."""
        return {
            key: None if isinstance(value, float) and math.isnan(value) else value
            for key, value in asdict(self).items()
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Candle":
        """Rebuild a candle from its persisted form."""

        def _price(key: str) -> float:
            value = data[key]
            return math.nan if value is None else float(value)

        volume = data.get("volume")
        return cls(
            time=int(data["time"]),
            open=_price("open"),
            high=_price("high"),
            low=_price("low"),
            close=_price("close"),
            volume=None if volume is None else float(volume),
        )


def dataset_id(symbol: str, interval: str) -> str:
    """Filesystem-safe series identifier, e.g. ``USD_JPY_1h``."""
    return f"{symbol.replace('/', '_')}_{interval}"


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Canonical candles as a DataFrame with a ``timestamp_utc`` column.

    Missing volumes and NaN prices both come through as NaN.
    """
    df = pd.DataFrame([c.to_dict() for c in candles], columns=CANDLE_COLUMNS)
    df[list(PRICE_FIELDS)] = df[list(PRICE_FIELDS)].astype(float)
    df["volume"] = pd.to_numeric(df["volume"], errors="coerce")
    df["timestamp_utc"] = pd.to_datetime(df["time"], unit="s", utc=True)
    return df
