"""Logging for the SDK: quiet library defaults plus a JSON console setup for the CLI."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .redaction import sanitize_for_logging, sanitize_text

LOGGER_NAME = "owm_weather_sdk"

# LogRecord attributes passed via `extra=` that the JSON formatter emits as fields.
CONTEXT_FIELDS = ("city", "outcome", "params")


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per record, with per-city context and secrets redacted."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = sanitize_for_logging(value)
        if record.threadName and record.threadName != "MainThread":
            event["thread"] = record.threadName
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the package logger (or a child) for library use.

    A NullHandler is attached once so an application that never configures
    logging does not get warnings from background refreshes on stderr.
    """
    root = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in root.handlers):
        root.addHandler(logging.NullHandler())
    return root.getChild(component) if component else root


def setup_logger(name: str = LOGGER_NAME, level: int | str = logging.INFO) -> logging.Logger:
    """Configure a process-wide JSON console logger, as the CLI does."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
