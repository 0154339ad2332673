"""Twelve Data candle download script.

Fetches one OHLCV series, normalizes it to oldest-first numeric candles and
writes data/<SYMBOL>_<INTERVAL>.json (the previous file is replaced).

Defaults come from the environment (.env.local / .env):
    TWELVE_DATA_API_KEY  required
    SYMBOL               default USD/JPY
    INTERVAL             default 1h
    START_DATE/END_DATE  YYYY-MM-DD, default trailing 3 years
    OUTPUTSIZE           optional record limit

Usage:
    # Default series (USD/JPY 1h, trailing 3 years)
    python scripts/fetch_data.py

    # Custom symbol, interval and range
    python scripts/fetch_data.py --symbol EUR/USD --interval 1day --start 2023-01-01 --end 2023-12-31

    # Reject malformed records instead of keeping NaN placeholders
    python scripts/fetch_data.py --strict

Example:
    $ python scripts/fetch_data.py
    [INFO] Data saved to data/USD_JPY_1h.json
    [INFO]   - Records: 5000
    [INFO]   - Symbol: USD/JPY
    [INFO]   - Interval: 1h
    [INFO]   - Period: 2023-10-19 ~ 2026-10-19
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.ingestion.collectors.twelve_data_collector import FetchOptions, parse_date
from src.pipelines.price.run_price_pipeline import run
from src.shared.config import Config
from src.shared.utils import setup_logger
from src.storage.candle_store import series_period


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch FX candles from Twelve Data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--symbol",
        type=str,
        help=f"Instrument symbol (default: {Config.SYMBOL})",
        metavar="SYMBOL",
    )

    parser.add_argument(
        "--interval",
        type=str,
        help=f"Bar interval (default: {Config.INTERVAL})",
        metavar="INTERVAL",
    )

    parser.add_argument(
        "--start",
        type=str,
        help="Start date (YYYY-MM-DD)",
        metavar="DATE",
    )

    parser.add_argument(
        "--end",
        type=str,
        help="End date (YYYY-MM-DD)",
        metavar="DATE",
    )

    parser.add_argument(
        "--outputsize",
        type=int,
        help="Maximum number of records to request",
        metavar="N",
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Output directory (default: {Config.DATA_DIR})",
        metavar="DIR",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on malformed records or out-of-order provider data",
    )

    parser.add_argument(
        "--save-raw",
        action="store_true",
        help="Also dump the raw API payload under data/raw/twelve_data/",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def build_options(args: argparse.Namespace) -> FetchOptions:
    """Command-line values layered over the environment defaults."""
    defaults = FetchOptions.from_config()
    return FetchOptions(
        symbol=args.symbol or defaults.symbol,
        interval=args.interval or defaults.interval,
        start_date=parse_date(args.start) if args.start else defaults.start_date,
        end_date=parse_date(args.end) if args.end else defaults.end_date,
        outputsize=args.outputsize or defaults.outputsize,
    )


def main() -> int:
    """Main download script."""
    args = parse_args()

    logger = setup_logger(
        "fetch_data",
        level="DEBUG" if args.verbose else "INFO",
    )

    try:
        Config.validate()
        options = build_options(args)

        result = run(
            options=options,
            data_dir=args.data_dir,
            strict=args.strict,
            save_raw=args.save_raw,
            logger=logger,
        )

        logger.info("✓ Data saved to %s", result.path)
        logger.info("  - Records: %d", len(result.candles))
        logger.info("  - Symbol: %s", result.symbol)
        logger.info("  - Interval: %s", result.interval)

        period = series_period(result.candles)
        if period:
            first, last = period
            logger.info("  - Period: %s ~ %s", first.date(), last.date())

        return 0

    except KeyboardInterrupt:
        logger.warning("Download interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Error fetching data: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
