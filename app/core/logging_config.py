# app/core/logging_config.py

import logging
from logging.config import dictConfig
from typing import Any, Dict

from app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_logging_config(level: str, log_file: str | None = None) -> Dict[str, Any]:
    """dictConfig for the API process: console always, a rotating file when LOG_FILE is set."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
    handler_names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": handlers,
        "loggers": {
            "uvicorn": {"handlers": handler_names, "level": "INFO", "propagate": False},
            "apscheduler": {"handlers": handler_names, "level": "WARNING", "propagate": False},
            # httpx logs every request at INFO; the portal client logs its own failures
            "httpx": {"handlers": handler_names, "level": "WARNING", "propagate": False},
            "app": {"handlers": handler_names, "level": level, "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": handler_names},
    }


def setup_logging(level: str | None = None):
    dictConfig(build_logging_config(level or settings.LOG_LEVEL, settings.LOG_FILE))
    logging.getLogger(__name__).debug("Logging configured.")
