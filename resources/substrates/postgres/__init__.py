"""Shared Postgres substrate primitives for change-trail services."""

from resources.substrates.postgres.bootstrap import bootstrap_schema, provision_schema
from resources.substrates.postgres.config import (
    PostgresSettings,
    resolve_postgres_settings,
)
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.errors import normalize_postgres_error
from resources.substrates.postgres.health import ProbeResult, ping, probe
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from resources.substrates.postgres.session import (
    TransactionalSessionProvider,
    create_session_factory,
    transactional_session,
)

__all__ = [
    "PostgresSettings",
    "ProbeResult",
    "ServiceSchemaSessionProvider",
    "TransactionalSessionProvider",
    "bootstrap_schema",
    "create_postgres_engine",
    "create_session_factory",
    "normalize_postgres_error",
    "ping",
    "probe",
    "provision_schema",
    "resolve_postgres_settings",
    "transactional_session",
]
