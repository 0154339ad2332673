"""Twelve Data Collector - raw ``time_series`` payloads.

Fetches one OHLCV series per call from the Twelve Data REST API and returns
the payload as delivered (values newest-first, all fields strings). Turning
that into canonical candles is the job of
:mod:`src.ingestion.preprocessors.candle_normalizer`.

Failure model:
    A single request, no retry. A non-2xx status, or a 200 response whose body
    reports an error (``"status": "error"`` or a top-level ``message``),
    raises :class:`TwelveDataError`.

API Documentation: https://twelvedata.com/docs#time-series
Get API Key: https://twelvedata.com/account/api-keys

Example:
    >>> from datetime import date
    >>> from src.ingestion.collectors.twelve_data_collector import (
    ...     FetchOptions, TwelveDataCollector,
    ... )
    >>>
    >>> collector = TwelveDataCollector()
    >>> response = collector.fetch(FetchOptions(symbol="EUR/USD", start_date=date(2024, 1, 1)))
    >>> len(response.values)
"""

import json
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from pathlib import Path

import requests

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.schema import TimeSeriesResponse, dataset_id
from src.shared.config import Config

DEFAULT_SYMBOL = "USD/JPY"
DEFAULT_INTERVAL = "1h"
DEFAULT_YEARS = 3


class TwelveDataError(RuntimeError):
    """The Twelve Data request failed or the API reported an error."""


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string.

    Raises:
        ValueError: If the string is not a valid date in that format.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date '{value}'. Use YYYY-MM-DD") from None


def years_before(day: date, years: int) -> date:
    """Same calendar day ``years`` earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


@dataclass(frozen=True)
class FetchOptions:
    """What to fetch from Twelve Data.

    Attributes:
        symbol: Instrument identifier (e.g. "USD/JPY").
        interval: Bar size (e.g. "1min", "1h", "1day").
        start_date: Inclusive start date; see ``build_params`` for defaults.
        end_date: Inclusive end date.
        outputsize: Maximum number of records to return.
    """

    symbol: str = DEFAULT_SYMBOL
    interval: str = DEFAULT_INTERVAL
    start_date: date | None = None
    end_date: date | None = None
    outputsize: int | None = None

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("symbol must not be empty")
        if not self.interval:
            raise ValueError("interval must not be empty")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"start_date ({self.start_date}) must be before end_date ({self.end_date})"
            )
        if self.outputsize is not None and self.outputsize <= 0:
            raise ValueError(f"outputsize must be positive, got {self.outputsize}")

    @classmethod
    def from_config(cls) -> "FetchOptions":
        """Options from environment-backed :class:`Config`."""
        return cls(
            symbol=Config.SYMBOL or DEFAULT_SYMBOL,
            interval=Config.INTERVAL or DEFAULT_INTERVAL,
            start_date=parse_date(Config.START_DATE) if Config.START_DATE else None,
            end_date=parse_date(Config.END_DATE) if Config.END_DATE else None,
            outputsize=Config.OUTPUTSIZE,
        )

    @property
    def dataset_name(self) -> str:
        """Filesystem-safe identifier, e.g. ``USD_JPY_1h``."""
        return dataset_id(self.symbol, self.interval)


def build_params(options: FetchOptions, api_key: str, today: date | None = None) -> dict[str, str]:
    """Query parameters for the ``time_series`` endpoint.

    Without any date bound the window is the trailing three years ending
    ``today`` (UTC). With one or both bounds only those are sent.
    """
    params = {
        "symbol": options.symbol,
        "interval": options.interval,
        "apikey": api_key,
        "format": "JSON",
    }

    if options.start_date is None and options.end_date is None:
        end = today or datetime.now(timezone.utc).date()
        params["start_date"] = years_before(end, DEFAULT_YEARS).isoformat()
        params["end_date"] = end.isoformat()
    else:
        if options.start_date:
            params["start_date"] = options.start_date.isoformat()
        if options.end_date:
            params["end_date"] = options.end_date.isoformat()

    if options.outputsize:
        params["outputsize"] = str(options.outputsize)

    return params


class TwelveDataCollector(BaseCollector):
    """Collector for Twelve Data OHLCV time series.

    Returns raw payloads with:
    - ``meta`` preserved as sent
    - ``values`` in provider order (newest first)
    - No numeric conversion
    """

    SOURCE_NAME = "twelve_data"

    BASE_URL = "https://api.twelvedata.com"

    def __init__(
        self,
        api_key: str | None = None,
        options: FetchOptions | None = None,
        output_dir: Path | None = None,
        log_file: Path | None = None,
        session: requests.Session | None = None,
        timeout: int | None = None,
    ) -> None:
        """Initialize the Twelve Data collector.

        Args:
            api_key: Twelve Data API key (defaults to Config.TWELVE_DATA_API_KEY).
            options: Default series selection (defaults to FetchOptions()).
            output_dir: Directory for raw JSON dumps (defaults to data/raw/twelve_data).
            log_file: Optional path for file-based logging.
            session: HTTP session to reuse (a new one is created if omitted).
            timeout: Request timeout in seconds (defaults to Config.REQUEST_TIMEOUT).

        Raises:
            ValueError: If api_key is not provided and not in Config.
        """
        super().__init__(
            output_dir=output_dir or Config.DATA_DIR / "raw" / self.SOURCE_NAME,
            log_file=log_file,
        )

        self._api_key = api_key or Config.TWELVE_DATA_API_KEY
        if not self._api_key:
            raise ValueError(
                "Twelve Data API key is required. Set TWELVE_DATA_API_KEY in .env.local "
                "or pass api_key parameter."
            )

        self.options = options or FetchOptions()
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self._session = session or requests.Session()

        self.logger.info(
            "TwelveDataCollector initialized, symbol=%s, interval=%s",
            self.options.symbol,
            self.options.interval,
        )

    # ------------------------------------------------------------------
    # BaseCollector interface
    # ------------------------------------------------------------------

    def collect(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> TimeSeriesResponse:
        """Fetch the configured series, optionally overriding the date window.

        Args:
            start_date: Start of range (default: options / trailing 3 years).
            end_date: End of range (default: options / today).

        Returns:
            Raw provider payload.
        """
        options = self.options
        if start_date or end_date:
            options = replace(
                options,
                start_date=start_date.date() if start_date else options.start_date,
                end_date=end_date.date() if end_date else options.end_date,
            )
        return self.fetch(options)

    def health_check(self) -> bool:
        """Verify the API answers and accepts the key (``/api_usage``)."""
        try:
            response = self._session.get(
                f"{self.BASE_URL}/api_usage",
                params={"apikey": self._api_key},
                timeout=10,
            )
            if not response.ok:
                return False
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            self.logger.error("Twelve Data health check failed: %s", e)
            return False
        return isinstance(payload, dict) and payload.get("status") != "error"

    # ------------------------------------------------------------------
    # Twelve Data-specific methods
    # ------------------------------------------------------------------

    def fetch(self, options: FetchOptions | None = None) -> TimeSeriesResponse:
        """Fetch one ``time_series`` payload.

        Args:
            options: Series selection (defaults to the collector's options).

        Returns:
            TimeSeriesResponse with values newest-first.

        Raises:
            TwelveDataError: HTTP failure, API error payload, or a payload
                without a ``values`` array.
            requests.exceptions.RequestException: Network failure.
        """
        options = options or self.options
        params = build_params(options, self._api_key)
        self.logger.info(
            "Fetching %s %s (%s to %s)",
            options.symbol,
            options.interval,
            params.get("start_date", "-"),
            params.get("end_date", "-"),
        )

        response = self._session.get(
            f"{self.BASE_URL}/time_series", params=params, timeout=self.timeout
        )
        if not response.ok:
            raise TwelveDataError(f"Failed to fetch data: {response.reason} - {response.text}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise TwelveDataError("Invalid API response: body is not JSON") from exc

        if not isinstance(payload, dict):
            raise TwelveDataError(f"Invalid API response: {json.dumps(payload)[:200]}")

        if payload.get("status") == "error" or payload.get("message"):
            raise TwelveDataError(f"API Error: {payload.get('message') or json.dumps(payload)}")

        try:
            series = TimeSeriesResponse.from_payload(payload)
        except ValueError as exc:
            raise TwelveDataError(str(exc)) from exc

        self.logger.info("Received %d rows for %s", len(series.values), options.dataset_name)
        return series
