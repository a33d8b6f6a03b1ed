"""Entity store persistence layer."""

from services.state.entity_store.data.repository import SqlEntityStore
from services.state.entity_store.data.schema import (
    ENTITY_TABLES,
    GLOBAL_ENTITY_TYPES,
    metadata,
)

__all__ = ["ENTITY_TABLES", "GLOBAL_ENTITY_TYPES", "SqlEntityStore", "metadata"]
