"""Exceptions raised by the entity store."""

from __future__ import annotations

from packages.trail_shared.errors import (
    ErrorDetail,
    codes,
    not_found_error,
    validation_error,
)


class UnknownEntityTypeError(ValueError):
    """Raised when an entity type has no backing table."""

    def __init__(self, entity_type: str) -> None:
        self.entity_type = entity_type
        self.error: ErrorDetail = validation_error(
            f"unknown entity type: {entity_type}",
            code=codes.INVALID_ARGUMENT,
            metadata={"entity_type": entity_type},
        )
        super().__init__(self.error.message)


class EntityNotFoundError(KeyError):
    """Raised when an update targets a row absent from the caller's tenant."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.error: ErrorDetail = not_found_error(
            f"{entity_type} not found: {entity_id}",
            code=codes.RESOURCE_NOT_FOUND,
            metadata={"entity_type": entity_type, "entity_id": entity_id},
        )
        super().__init__(self.error.message)
