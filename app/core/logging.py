"""Logging configuration."""

import logging.config

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root and application loggers for console output."""
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "detailed": {
                    "format": "{asctime} {levelname} [{name}:{lineno}] {message}",
                    "style": "{",
                },
            },
            "handlers": {
                "console": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "detailed",
                },
            },
            "loggers": {
                "app": {
                    "handlers": ["console"],
                    "level": level,
                    "propagate": False,
                },
            },
            "root": {
                "handlers": ["console"],
                "level": "WARNING",
            },
        }
    )
