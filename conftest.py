"""Pytest configuration for the change-trail test suite."""

import os
from collections.abc import Generator

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from packages.trail_shared.logging import clear_context
from resources.substrates.postgres.session import (
    TransactionalSessionProvider,
    create_session_factory,
)
from services.state.change_tracking.data.schema import metadata as change_metadata
from services.state.entity_store.data.schema import metadata as entity_metadata


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop ambient TRAIL_* settings and logging context between tests."""
    for key in list(os.environ):
        if key.startswith("TRAIL_"):
            monkeypatch.delenv(key, raising=False)
    clear_context()
    yield
    clear_context()


@pytest.fixture()
def sqlite_engine() -> Generator[Engine, None, None]:
    """Provide an in-memory sqlite engine with every owned table created."""
    engine = create_engine("sqlite:///:memory:")
    entity_metadata.create_all(engine)
    change_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def sqlite_session_factory(sqlite_engine: Engine) -> sessionmaker[Session]:
    """Provide a sqlite session factory bound to the shared test engine."""
    return create_session_factory(sqlite_engine)


@pytest.fixture()
def sessions(sqlite_session_factory: sessionmaker[Session]) -> TransactionalSessionProvider:
    """Provide commit/rollback scoped sessions over the sqlite engine."""
    return TransactionalSessionProvider(session_factory=sqlite_session_factory)
