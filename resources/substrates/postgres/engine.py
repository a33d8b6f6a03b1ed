"""Engine construction from ``PostgresSettings``."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url

from packages.trail_shared.config import PostgresSettings

APPLICATION_NAME = "change-trail"


def engine_options(config: PostgresSettings) -> dict[str, Any]:
    """Keyword arguments for ``create_engine``.

    Pool sizing and libpq connect arguments apply to Postgres URLs only;
    other backends (SQLite in tests) keep their dialect defaults.
    """
    options: dict[str, Any] = {"pool_pre_ping": config.pool_pre_ping}
    if make_url(config.url).get_backend_name() != "postgresql":
        return options

    options.update(
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        connect_args={
            "connect_timeout": int(config.connect_timeout_seconds),
            "sslmode": config.sslmode,
            "application_name": APPLICATION_NAME,
        },
    )
    return options


def create_postgres_engine(config: PostgresSettings) -> Engine:
    return create_engine(config.url, **engine_options(config))
