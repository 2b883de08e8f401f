"""Logging setup shared by the API, CLI and tests."""
import logging.config

from rxdesk.core.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "rxdesk": {"level": settings.LOG_LEVEL},
        "sqlalchemy.engine": {"level": "WARNING"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}


def setup_logging() -> None:
    logging.config.dictConfig(LOGGING_CONFIG)
