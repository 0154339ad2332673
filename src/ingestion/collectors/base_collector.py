"""Abstract base class for market-data collectors.

Collectors fetch one provider payload and hand it back untouched:
- No transformation of provider fields
- Raw payloads can be dumped to data/raw/{source}/ for inspection
- File naming: {source}_{dataset}_{YYYYMMDD}.json

Normalization into canonical candles is handled by preprocessors.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from datetime import datetime
from pathlib import Path

from src.ingestion.schema import TimeSeriesResponse
from src.shared.utils import setup_logger


class BaseCollector(ABC):
    """Base class for all data collectors.

    Subclasses must define:
        SOURCE_NAME (str): identifier used in file naming (e.g. "twelve_data").

    Subclasses must implement:
        collect(): fetch the series for a date range.
        health_check(): verify the source is reachable.

    The export_raw() method handles raw JSON naming automatically.
    """

    SOURCE_NAME: str  # e.g. "twelve_data"

    def __init__(self, output_dir: Path, log_file: Path | None = None) -> None:
        """Initialize the collector.

        Args:
            output_dir: Directory for raw JSON exports (created on first export).
            log_file: Optional path for file-based logging.
        """
        self.output_dir = output_dir
        self.logger = setup_logger(self.__class__.__name__, log_file)

    @abstractmethod
    def collect(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> TimeSeriesResponse:
        """Collect the configured series from the source.

        Args:
            start_date: Start of the collection window.
            end_date: End of the collection window.

        Returns:
            The provider payload, values in provider order.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the data source is reachable and responding.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    def export_raw(self, response: TimeSeriesResponse, dataset_name: str) -> Path:
        """Dump a provider payload as JSON.

        File path: {output_dir}/{SOURCE_NAME}_{dataset_name}_{YYYYMMDD}.json

        Args:
            response: Payload to export.
            dataset_name: Dataset identifier (e.g. "USD_JPY_1h").

        Returns:
            Path to the written file.

        Raises:
            ValueError: If the payload has no values.
        """
        if not response.values:
            raise ValueError(f"Cannot export empty payload for '{dataset_name}'")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        date_str = datetime.now().strftime("%Y%m%d")
        path = self.output_dir / f"{self.SOURCE_NAME}_{dataset_name}_{date_str}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(response), f, indent=2, ensure_ascii=False)
        self.logger.info("Exported %d raw records to %s", len(response.values), path)
        return path
