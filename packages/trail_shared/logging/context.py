"""Contextvar-backed log fields for tenant, entity and actor correlation."""

from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

from . import fields

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar("trail_log_context", default={})


def get_context() -> dict[str, str]:
    """Return a copy of the bound fields."""
    return dict(_LOG_CONTEXT.get())


def _merged(current: Mapping[str, str], values: Mapping[str, object]) -> dict[str, str]:
    merged = dict(current)
    merged.update(
        {str(key): str(value) for key, value in values.items() if value is not None}
    )
    return merged


def bind_context(**values: object) -> None:
    """Bind fields for the rest of the current context; ``None`` is ignored."""
    if values:
        _LOG_CONTEXT.set(_merged(_LOG_CONTEXT.get(), values))


def clear_context(*keys: str) -> None:
    """Drop ``keys``, or every bound field when called without arguments."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    _LOG_CONTEXT.set(
        {key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys}
    )


@contextmanager
def log_context(values: Mapping[str, object] | None = None, **extra: object) -> Iterator[None]:
    """Bind fields for one block and restore the outer context afterwards."""
    token = _LOG_CONTEXT.set(_merged(_LOG_CONTEXT.get(), {**(values or {}), **extra}))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def entity_context(entity_type: str, entity_id: str) -> AbstractContextManager[None]:
    """Scope log lines to one entity instance."""
    return log_context({fields.ENTITY_TYPE: entity_type, fields.ENTITY_ID: entity_id})
