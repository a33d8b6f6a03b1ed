"""Change-tracking database runtime wiring.

Composes the shared Postgres substrate primitives into a service-local
runtime. Postgres deployments pin sessions to the configured schema via
``search_path``; ``from_engine`` serves any other SQLAlchemy engine.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from packages.trail_shared.config import TrailSettings
from resources.substrates.postgres import (
    ProbeResult,
    ServiceSchemaSessionProvider,
    TransactionalSessionProvider,
    create_postgres_engine,
    create_session_factory,
    probe,
    resolve_postgres_settings,
)


@dataclass(frozen=True)
class ChangeTrackingRuntime:
    """Concrete handle for transaction-scoped database access."""

    engine: Engine
    session_factory: sessionmaker[Session]
    sessions: TransactionalSessionProvider

    @classmethod
    def from_settings(cls, settings: TrailSettings) -> "ChangeTrackingRuntime":
        """Build a schema-pinned Postgres runtime from root settings."""
        postgres = resolve_postgres_settings(settings)
        engine = create_postgres_engine(postgres)
        session_factory = create_session_factory(engine)
        return cls(
            engine=engine,
            session_factory=session_factory,
            sessions=ServiceSchemaSessionProvider(
                session_factory=session_factory,
                schema=postgres.schema_name,
            ),
        )

    @classmethod
    def from_engine(cls, engine: Engine) -> "ChangeTrackingRuntime":
        """Build a runtime over an existing engine without schema pinning."""
        session_factory = create_session_factory(engine)
        return cls(
            engine=engine,
            session_factory=session_factory,
            sessions=TransactionalSessionProvider(session_factory=session_factory),
        )

    def is_healthy(self) -> bool:
        """Return ``True`` when the backing database answers a probe."""
        return self.health().healthy

    def health(self) -> ProbeResult:
        return probe(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
