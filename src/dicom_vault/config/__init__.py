"""Configuration for DicomVault."""

from .settings import Settings, get_settings
from .logging_config import LoggingConfig, setup_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
]
