"""Pre-migration bootstrap for the change-trail schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import text

from packages.trail_shared.config import TrailSettings, load_settings
from packages.trail_shared.logging import configure_logging_from_settings, get_logger
from resources.substrates.postgres.config import resolve_postgres_settings
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.schema_session import validate_schema_name

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BootstrapResult:
    """Summary of pre-migration bootstrap actions."""

    provisioned_schema: str


def provision_schema(*, connection: Any, schema: str) -> None:
    """Create one owned schema when it does not already exist."""
    validate_schema_name(schema)
    connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))


def bootstrap_schema(settings: TrailSettings | None = None) -> BootstrapResult:
    """Provision the configured schema ahead of alembic migrations."""
    resolved_settings = load_settings() if settings is None else settings
    postgres_config = resolve_postgres_settings(resolved_settings)

    engine = create_postgres_engine(postgres_config)
    try:
        with engine.begin() as connection:
            provision_schema(connection=connection, schema=postgres_config.schema_name)
    finally:
        engine.dispose()

    _LOGGER.info("schema provisioned: schema=%s", postgres_config.schema_name)
    return BootstrapResult(provisioned_schema=postgres_config.schema_name)


def main() -> None:
    """CLI entrypoint for migration bootstrap."""
    settings = load_settings()
    configure_logging_from_settings(settings.logging)
    result = bootstrap_schema(settings)
    print(f"Provisioned schema: {result.provisioned_schema}")


if __name__ == "__main__":
    main()
