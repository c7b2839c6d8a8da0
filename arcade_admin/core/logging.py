"""Process-wide logging configuration."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from arcade_admin.core.config import Settings

_configured = False


def configure_logging(settings: Settings) -> None:
    """Install the console handler once; later calls only adjust the level."""
    global _configured
    level = settings.logging.level.upper()
    if _configured:
        logging.getLogger().setLevel(level)
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.logging.format},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
    _configured = True
