"""Tenant-aware SQL persistence for compliance entities."""

from services.state.entity_store.data import SqlEntityStore
from services.state.entity_store.errors import (
    EntityNotFoundError,
    UnknownEntityTypeError,
)

__all__ = ["EntityNotFoundError", "SqlEntityStore", "UnknownEntityTypeError"]
