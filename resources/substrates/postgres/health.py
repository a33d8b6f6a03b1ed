"""Readiness probe for the relational substrate."""

from __future__ import annotations

import time
from dataclasses import dataclass

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from packages.trail_shared.errors import ErrorDetail
from packages.trail_shared.logging import get_logger
from resources.substrates.postgres.errors import normalize_postgres_error

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    healthy: bool
    latency_ms: float
    error: ErrorDetail | None = None


def probe(engine: Engine, *, timeout_seconds: float = 1.0) -> ProbeResult:
    """Run ``SELECT 1``, bounded by ``statement_timeout`` on Postgres."""
    started = time.monotonic()
    try:
        with engine.connect() as connection:
            if connection.dialect.name == "postgresql":
                connection.execute(
                    text("SELECT set_config('statement_timeout', :timeout, false)"),
                    {"timeout": f"{max(1, int(timeout_seconds * 1000))}ms"},
                )
            connection.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        error = normalize_postgres_error(exc)
        _LOGGER.warning(
            "database probe failed: code=%s exception_type=%s",
            error.code,
            type(exc).__name__,
        )
        return ProbeResult(
            healthy=False,
            latency_ms=(time.monotonic() - started) * 1000,
            error=error,
        )
    return ProbeResult(healthy=True, latency_ms=(time.monotonic() - started) * 1000)


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> bool:
    return probe(engine, timeout_seconds=timeout_seconds).healthy
