"""Configuration management for aurafx."""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parent.parent.parent

# .env.local (developer machine) wins over .env; CI passes plain env vars.
load_dotenv(ROOT_DIR / ".env.local")
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = ROOT_DIR
    DATA_DIR = ROOT_DIR / "data"
    LOGS_DIR = ROOT_DIR / "logs"
    SITE_DIR = ROOT_DIR / "site"

    # API Keys
    TWELVE_DATA_API_KEY: Optional[str] = os.getenv("TWELVE_DATA_API_KEY")

    # Series selection
    SYMBOL: str = os.getenv("SYMBOL", "USD/JPY")
    INTERVAL: str = os.getenv("INTERVAL", "1h")
    START_DATE: Optional[str] = os.getenv("START_DATE") or None  # YYYY-MM-DD
    END_DATE: Optional[str] = os.getenv("END_DATE") or None  # YYYY-MM-DD
    OUTPUTSIZE: Optional[int] = _optional_int("OUTPUTSIZE")

    # HTTP
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TWELVE_DATA_API_KEY:
            raise ValueError("TWELVE_DATA_API_KEY not set in environment")


config = Config()
