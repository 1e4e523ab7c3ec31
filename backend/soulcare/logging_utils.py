from __future__ import annotations

import json
import logging
from logging.config import dictConfig
from typing import Any, Dict

import sentry_sdk

from .config import settings

# attributes every LogRecord carries; the rest came in through extra= or the filter
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Anything passed through ``extra=`` (and the request context injected by
    ``RequestContextFilter``) ends up under ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting only
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "timestamp": self.formatTime(record, self.datefmt),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and value is not None
        }
        if extras:
            data["context"] = extras
        return json.dumps(data, ensure_ascii=False, default=str)


def setup_logging(level: str | None = None) -> None:
    """
    Configure root logging to emit JSON lines. Safe to call multiple times.
    """

    resolved = (level or settings.log_level).upper()
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {
                "()": "soulcare.logging_context.RequestContextFilter",
            }
        },
        "formatters": {
            "json": {
                "()": "soulcare.logging_utils.JSONFormatter",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["request_context"],
                "level": resolved,
            }
        },
        "root": {
            "handlers": ["default"],
            "level": resolved,
        },
    }
    dictConfig(config)


def setup_sentry() -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
    )
    return True
