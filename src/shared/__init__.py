"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import epoch_seconds, setup_logger, to_utc

__all__ = ["Config", "setup_logger", "to_utc", "epoch_seconds"]
