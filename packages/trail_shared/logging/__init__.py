"""Structured stdout logging with contextvar-bound correlation fields."""

from . import fields
from .config import configure_logging, configure_logging_from_settings, get_logger
from .context import (
    bind_context,
    clear_context,
    entity_context,
    get_context,
    log_context,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "configure_logging_from_settings",
    "entity_context",
    "fields",
    "get_context",
    "get_logger",
    "log_context",
]
