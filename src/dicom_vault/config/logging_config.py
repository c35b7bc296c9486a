"""Centralized logging configuration for DicomVault.

Provides consistent, configurable logging with environment-based control over
verbosity, format and the chattiness of third-party clients.
"""

import logging
import logging.config
import os
from typing import Dict, Any
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # Only errors and critical
    NORMAL = "NORMAL"    # Info and above
    VERBOSE = "VERBOSE"  # Info and above, pipeline modules included
    DEBUG = "DEBUG"      # Full debug logging


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


def get_log_level_from_verbosity(verbosity: str, default: str = LogLevel.INFO.value) -> str:
    """Map verbosity mode to log level."""
    verbosity_map = {
        LogVerbosity.QUIET: LogLevel.ERROR.value,
        LogVerbosity.NORMAL: default,
        LogVerbosity.VERBOSE: LogLevel.INFO.value,
        LogVerbosity.DEBUG: LogLevel.DEBUG.value,
    }
    try:
        return verbosity_map[LogVerbosity(verbosity.upper())]
    except ValueError:
        return default


def get_format_string(log_format: str) -> str:
    """Resolve a LOG_FORMAT value to a logging format string."""
    if log_format == LogFormat.JSON.value:
        return '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}'
    if log_format == LogFormat.DETAILED.value:
        return "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
    return "%(asctime)s - %(levelname)s - %(message)s"


class LoggingConfig:
    """Centralized logging configuration manager.

    ``LOG_PIPELINE_LEVEL`` overrides the level of the upload pipeline modules
    alone, so chunk and merge activity can be traced without turning on debug
    output everywhere else.
    """

    PIPELINE_LOGGER = "dicom_vault.features.uploads"

    # Per-chunk and per-query chatter
    DEFAULT_QUIET_MODULES = [
        "dicom_vault.database.connection",
        "dicom_vault.features.uploads.services.staging",
        "dicom_vault.features.uploads.services.chunk_receiver",
    ]

    # Transport libraries under the object store and AI clients
    ERROR_ONLY_MODULES = [
        "httpx",
        "httpcore",
        "botocore",
        "boto3",
        "s3transfer",
        "urllib3",
        "asyncio",
    ]

    @staticmethod
    def _logger_entry(level: str, propagate: bool = False) -> Dict[str, Any]:
        return {"level": level, "handlers": ["console"], "propagate": propagate}

    @classmethod
    def build_config(cls) -> Dict[str, Any]:
        """Build the dictConfig mapping from environment variables."""
        base_level = os.getenv("LOG_LEVEL", "INFO").upper()
        verbosity = os.getenv("LOG_VERBOSITY", LogVerbosity.NORMAL.value).upper()
        log_format = os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).lower()
        pipeline_level = os.getenv("LOG_PIPELINE_LEVEL", "").upper()
        sql_logging = os.getenv("ENABLE_SQL_LOGGING", "false").lower() == "true"

        level = get_log_level_from_verbosity(verbosity, default=base_level)
        loggers: Dict[str, Any] = {}

        if verbosity != LogVerbosity.VERBOSE.value:
            quiet_level = LogLevel.DEBUG.value if level == LogLevel.DEBUG.value else LogLevel.WARNING.value
            loggers.update({name: cls._logger_entry(quiet_level) for name in cls.DEFAULT_QUIET_MODULES})

        loggers.update({name: cls._logger_entry(LogLevel.ERROR.value) for name in cls.ERROR_ONLY_MODULES})

        if pipeline_level in LogLevel.__members__:
            for name in [n for n in loggers if n.startswith(cls.PIPELINE_LOGGER)]:
                del loggers[name]
            loggers[cls.PIPELINE_LOGGER] = cls._logger_entry(pipeline_level)

        loggers["asyncpg"] = cls._logger_entry(LogLevel.DEBUG.value if sql_logging else LogLevel.WARNING.value)

        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": get_format_string(log_format), "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": LogLevel.DEBUG.value if pipeline_level == LogLevel.DEBUG.value else level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": loggers,
        }

    @classmethod
    def configure(cls) -> None:
        """Configure logging based on environment variables."""
        config = cls.build_config()
        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug(
            f"Logging configured: level={config['root']['level']}, "
            f"pipeline={config['loggers'].get(cls.PIPELINE_LOGGER, {}).get('level', 'inherited')}"
        )

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module.

        Args:
            module_name: Name of the module
            level: Log level to set
        """
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    @classmethod
    def silence_module(cls, module_name: str) -> None:
        """Silence all logging from a module."""
        cls.set_module_level(module_name, "CRITICAL")


def setup_logging() -> None:
    """Setup logging configuration from environment variables.

    Called once at application startup.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger."""
    return logging.getLogger(name)
