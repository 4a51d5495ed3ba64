"""Centralized logging configuration for neo-membership.

Provides consistent, configurable logging with environment-based control
over level and format.
"""

import logging
import logging.config
from enum import Enum
from typing import Any, Dict, Optional

from .settings import get_settings


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


FORMAT_STRINGS = {
    LogFormat.SIMPLE: "%(asctime)s - %(levelname)s - %(message)s",
    LogFormat.DETAILED: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    LogFormat.JSON: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
}


class LoggingConfig:
    """Centralized logging configuration manager."""

    # Modules that should only log errors
    ERROR_ONLY_MODULES = [
        "asyncpg",
        "asyncio",
        "redis",
    ]

    @classmethod
    def build(cls, log_level: str, log_format: str) -> Dict[str, Any]:
        """Build a dictConfig mapping for the given level and format."""
        effective_log_level = log_level.upper()
        try:
            format_string = FORMAT_STRINGS[LogFormat(log_format.lower())]
        except ValueError:
            format_string = FORMAT_STRINGS[LogFormat.SIMPLE]

        logging_config: Dict[str, Any] = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": effective_log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "neo_membership": {
                    "level": effective_log_level,
                    "handlers": ["console"],
                    "propagate": False,
                },
            },
        }

        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            }

        return logging_config

    @classmethod
    def configure(
        cls,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None
    ) -> None:
        """Configure logging from arguments, falling back to settings."""
        settings = get_settings()
        level = log_level or settings.log_level
        fmt = log_format or settings.log_format

        logging.config.dictConfig(cls.build(level, fmt))

        logger = logging.getLogger(__name__)
        logger.debug(f"Logging configured: level={level.upper()}, format={fmt}")


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None
) -> None:
    """Setup logging configuration.

    This is the main entry point for configuring logging in a host
    application. It should be called once at startup.
    """
    LoggingConfig.configure(log_level, log_format)
