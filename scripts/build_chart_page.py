"""Chart page build script.

Reads data/<SYMBOL>_<INTERVAL>.json and writes a static HTML page with an
interactive candlestick chart. A missing, empty or unreadable data file does
not fail the build: the page shows the problem and a "No data available"
placeholder instead.

Usage:
    # Default series (USD/JPY 1h) → site/index.html
    python scripts/build_chart_page.py

    # Another series / output location
    python scripts/build_chart_page.py --symbol EUR/USD --interval 1day --output public/eurusd.html
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.analytics.series_stats import compute_series_stats
from src.shared.config import Config
from src.shared.utils import setup_logger
from src.storage.candle_store import load_series, series_path
from src.web.chart_page import render_chart_page


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the candlestick chart page",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--symbol", type=str, default=Config.SYMBOL, metavar="SYMBOL")
    parser.add_argument("--interval", type=str, default=Config.INTERVAL, metavar="INTERVAL")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory holding the series file (default: {Config.DATA_DIR})",
        metavar="DIR",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Config.SITE_DIR / "index.html",
        help="HTML file to write (default: site/index.html)",
        metavar="FILE",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser.parse_args()


def main() -> int:
    """Main build script."""
    args = parse_args()
    logger = setup_logger("build_chart_page", level="DEBUG" if args.verbose else "INFO")

    try:
        path = series_path(args.symbol, args.interval, args.data_dir)
        loaded = load_series(path)
        if loaded.error:
            logger.warning("%s", loaded.error)

        html = render_chart_page(
            loaded.candles,
            symbol=loaded.meta.get("symbol") or args.symbol,
            stats=compute_series_stats(loaded.candles),
            error=loaded.error,
        )

        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(html, encoding="utf-8")
        logger.info("✓ Page written to %s (%d candles)", args.output, len(loaded.candles))
        return 0

    except Exception as e:
        logger.exception("Error building chart page: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
