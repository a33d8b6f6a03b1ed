"""Alembic environment for the ``change_records`` table."""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import text

from packages.trail_shared.config import load_settings
from resources.substrates.postgres import (
    create_postgres_engine,
    provision_schema,
    resolve_postgres_settings,
)
from services.state.change_tracking.data.schema import metadata

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

postgres = resolve_postgres_settings(load_settings())


def _configure(**kwargs: object) -> None:
    context.configure(
        target_metadata=metadata,
        version_table_schema=postgres.schema_name,
        include_schemas=False,
        **kwargs,
    )


def run_offline() -> None:
    _configure(
        url=postgres.url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_postgres_engine(postgres)
    try:
        with engine.connect() as connection:
            if connection.dialect.name == "postgresql":
                provision_schema(connection=connection, schema=postgres.schema_name)
                connection.execute(
                    text(f"SET search_path TO {postgres.schema_name}, public")
                )
                connection.commit()
            _configure(connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
