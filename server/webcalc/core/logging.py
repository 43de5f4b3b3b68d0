from __future__ import annotations

import logging
import logging.config
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from webcalc.core.context import get_request_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


def _build_logging_config(level: str = "INFO") -> Dict[str, Any]:
    level = level.upper()
    handler_config = {"handlers": ["default"], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {
                "()": RequestContextFilter,
            }
        },
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "fmt": LOG_FORMAT,
                "datefmt": LOG_DATE_FORMAT,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["request_context"],
            }
        },
        "loggers": {
            "uvicorn": dict(handler_config),
            "uvicorn.error": dict(handler_config),
            "uvicorn.access": dict(handler_config),
            "sqlalchemy.engine": {"handlers": ["default"], "level": "WARNING", "propagate": False},
            "webcalc": dict(handler_config),
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(_build_logging_config(level))
