"""Exceptions raised by the change-tracking pipeline.

Each exception carries an ``ErrorDetail`` on ``.error`` for callers that map
failures into structured responses.
"""

from __future__ import annotations

from packages.trail_shared.errors import (
    ErrorCategory,
    ErrorDetail,
    codes,
    internal_error,
    not_found_error,
    policy_error,
)
from resources.substrates.postgres.errors import normalize_postgres_error


class ChangeTrackingError(Exception):
    """Base class for change-tracking failures."""

    def __init__(self, error: ErrorDetail) -> None:
        self.error = error
        super().__init__(error.message)


class TrackedEntityNotFoundError(ChangeTrackingError):
    """The entity to update is not visible to the caller's tenant."""

    def __init__(self, *, entity_type: str, entity_id: str) -> None:
        super().__init__(
            not_found_error(
                f"{entity_type} not found: {entity_id}",
                code=codes.TRACKED_ENTITY_NOT_FOUND,
                metadata={"entity_type": entity_type, "entity_id": entity_id},
            )
        )


class TenantIsolationError(ChangeTrackingError):
    """An entity row belongs to a different tenant than the call."""

    def __init__(self, *, entity_type: str, entity_id: str, tenant_id: str) -> None:
        super().__init__(
            policy_error(
                f"{entity_type} {entity_id} does not belong to tenant {tenant_id}",
                code=codes.TENANT_MISMATCH,
                metadata={
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "tenant_id": tenant_id,
                },
            )
        )


class SnapshotUnavailableError(ChangeTrackingError):
    """The entity could not be re-read after its mutation."""

    def __init__(self, *, entity_type: str, entity_id: str) -> None:
        super().__init__(
            internal_error(
                f"{entity_type} {entity_id} unreadable after mutation",
                code=codes.SNAPSHOT_UNAVAILABLE,
                metadata={"entity_type": entity_type, "entity_id": entity_id},
            )
        )


class ChangeTrackingStorageError(ChangeTrackingError):
    """A storage failure aborted the mutation and its records."""

    @classmethod
    def from_exception(cls, exc: Exception) -> "ChangeTrackingStorageError":
        """Wrap a driver/SQLAlchemy exception with its normalized detail."""
        return cls(
            normalize_postgres_error(exc).recoded(
                codes.CHANGE_RECORD_STORAGE_FAILURE,
                category=ErrorCategory.DEPENDENCY,
            )
        )
