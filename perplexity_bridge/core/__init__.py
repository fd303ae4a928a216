"""Core infrastructure utilities."""

from .config import BridgeSettings, get_settings
from .logging_config import configure_logging, get_logger

__all__ = [
    "BridgeSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
