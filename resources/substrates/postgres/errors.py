"""Normalization of SQLAlchemy and driver failures into ``ErrorDetail``."""

from __future__ import annotations

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
    TimeoutError as PoolTimeoutError,
)

from packages.trail_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
    validation_error,
)

_UNIQUE_VIOLATION = "23505"
_SERIALIZATION_FAILURES = frozenset({"40001", "40P01"})


def _sqlstate(exc: Exception) -> str | None:
    """SQLSTATE reported by psycopg, when the driver exposes one."""
    original = getattr(exc, "orig", None)
    return getattr(original, "sqlstate", None)


def normalize_postgres_error(exc: Exception) -> ErrorDetail:
    """Classify one database failure.

    Connectivity, pool exhaustion and serialization conflicts are retryable;
    constraint and statement errors are not.
    """
    metadata = {"exception_type": type(exc).__name__}
    sqlstate = _sqlstate(exc)
    if sqlstate:
        metadata["sqlstate"] = sqlstate

    if isinstance(exc, IntegrityError):
        if sqlstate == _UNIQUE_VIOLATION or "unique constraint" in str(exc).lower():
            return conflict_error(
                "resource already exists", code=codes.ALREADY_EXISTS, metadata=metadata
            )
        return validation_error(
            "row violates a storage constraint",
            code=codes.CONSTRAINT_VIOLATION,
            metadata=metadata,
        )

    if sqlstate in _SERIALIZATION_FAILURES:
        return dependency_error(
            "transaction conflicted with a concurrent writer",
            code=codes.DEPENDENCY_FAILURE,
            metadata=metadata,
        )

    if isinstance(exc, PoolTimeoutError):
        return dependency_error(
            "connection pool exhausted", code=codes.DEPENDENCY_TIMEOUT, metadata=metadata
        )

    if isinstance(exc, OperationalError) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        return dependency_error(
            "database unavailable", code=codes.DEPENDENCY_UNAVAILABLE, metadata=metadata
        )

    if isinstance(exc, (InterfaceError, ProgrammingError)):
        return dependency_error(
            "database request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        "unexpected database failure", code=codes.UNEXPECTED_EXCEPTION, metadata=metadata
    )
