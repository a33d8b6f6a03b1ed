"""Stdout logging setup for change-trail processes."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from packages.trail_shared.config import LoggingSettings

from . import fields
from .context import bind_context, get_context


def structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Collect bound context plus known fields passed through ``extra``."""
    collected: dict[str, Any] = dict(getattr(record, "context", None) or {})
    for name in fields.STRUCTURED_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            collected[name] = value
    return collected


class ContextFilter(logging.Filter):
    """Copy the current log context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_context()
        record.context = context
        for key, value in context.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line: core fields, then structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **structured_fields(record),
        }
        if record.exc_info:
            payload[fields.EXCEPTION] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra = structured_fields(record)
        if not extra:
            return message
        return message + " " + " ".join(
            f"{key}={value}" for key, value in sorted(extra.items())
        )


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Install one stdout handler on the root logger, replacing existing ones."""
    normalized_level = level.upper()
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(normalized_level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(normalized_level)

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def configure_logging_from_settings(settings: LoggingSettings) -> None:
    """Apply the ``logging`` section of root settings."""
    configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
