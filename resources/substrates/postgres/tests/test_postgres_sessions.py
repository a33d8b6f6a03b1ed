"""Tests for transactional session helpers and error normalization."""

from __future__ import annotations

import pytest
from sqlalchemy import Column, Integer, MetaData, Table, create_engine, insert, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from packages.trail_shared.errors import ErrorCategory, codes
from resources.substrates.postgres.errors import normalize_postgres_error
from resources.substrates.postgres.schema_session import ServiceSchemaSessionProvider
from resources.substrates.postgres.session import (
    TransactionalSessionProvider,
    create_session_factory,
)

_METADATA = MetaData()
_ITEMS = Table("items", _METADATA, Column("id", Integer, primary_key=True))


@pytest.fixture
def provider():
    engine = create_engine("sqlite:///:memory:")
    _METADATA.create_all(engine)
    yield TransactionalSessionProvider(session_factory=create_session_factory(engine))
    engine.dispose()


def test_session_commits_on_success(provider) -> None:
    with provider.session() as session:
        session.execute(insert(_ITEMS).values(id=1))

    with provider.session() as session:
        assert session.execute(select(_ITEMS.c.id)).scalars().all() == [1]


def test_session_rolls_back_on_error(provider) -> None:
    with pytest.raises(RuntimeError):
        with provider.session() as session:
            session.execute(insert(_ITEMS).values(id=2))
            raise RuntimeError("abort")

    with provider.session() as session:
        assert session.execute(select(_ITEMS.c.id)).scalars().all() == []


def test_schema_provider_validates_schema_name() -> None:
    engine = create_engine("sqlite:///:memory:")
    factory = create_session_factory(engine)
    try:
        assert (
            ServiceSchemaSessionProvider(session_factory=factory, schema="trail_1").schema
            == "trail_1"
        )
        with pytest.raises(ValueError):
            ServiceSchemaSessionProvider(session_factory=factory, schema="")
    finally:
        engine.dispose()


def test_normalize_maps_unique_violation_to_conflict() -> None:
    exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: items.id"))
    error = normalize_postgres_error(exc)
    assert error.category == ErrorCategory.CONFLICT
    assert error.code == codes.ALREADY_EXISTS
    assert error.metadata["exception_type"] == "IntegrityError"


def test_normalize_maps_operational_error_to_retryable_dependency() -> None:
    exc = OperationalError("SELECT 1", {}, Exception("connection refused"))
    error = normalize_postgres_error(exc)
    assert error.category == ErrorCategory.DEPENDENCY
    assert error.retryable is True


def test_normalize_falls_back_to_internal() -> None:
    error = normalize_postgres_error(RuntimeError("boom"))
    assert error.category == ErrorCategory.INTERNAL
    assert error.code == codes.UNEXPECTED_EXCEPTION


class _DriverError(Exception):
    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def test_normalize_maps_check_violation_to_validation() -> None:
    exc = IntegrityError(
        "INSERT", {}, _DriverError("violates check constraint", sqlstate="23514")
    )
    error = normalize_postgres_error(exc)
    assert error.category == ErrorCategory.VALIDATION
    assert error.code == codes.CONSTRAINT_VIOLATION
    assert error.metadata["sqlstate"] == "23514"


def test_normalize_marks_serialization_failure_retryable() -> None:
    exc = OperationalError(
        "UPDATE", {}, _DriverError("could not serialize access", sqlstate="40001")
    )
    error = normalize_postgres_error(exc)
    assert error.category == ErrorCategory.DEPENDENCY
    assert error.code == codes.DEPENDENCY_FAILURE
    assert error.retryable is True


def test_normalize_maps_pool_timeout() -> None:
    error = normalize_postgres_error(PoolTimeoutError("QueuePool limit reached"))
    assert error.code == codes.DEPENDENCY_TIMEOUT
    assert error.retryable is True
