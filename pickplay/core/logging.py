"""Logging configuration for the Pick&Play backend."""

import logging
from logging.config import dictConfig

from pickplay.core.config import settings


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level.upper(),
            }
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging."""

    dictConfig(build_logging_config(level or settings.log_level))
    logging.getLogger(__name__).debug("Logging configured")
