"""Change-tracking audit trail for compliance entities."""

from services.state.change_tracking.config import (
    SERVICE_COMPONENT_ID,
    ChangeTrackingSettings,
    resolve_change_tracking_settings,
)
from services.state.change_tracking.domain import (
    ChangeContext,
    ChangeKind,
    ChangeQuery,
    ChangeRecord,
    LogicalChangeKind,
    ReferenceSnapshot,
    Snapshot,
)
from services.state.change_tracking.errors import (
    ChangeTrackingError,
    ChangeTrackingStorageError,
    SnapshotUnavailableError,
    TenantIsolationError,
    TrackedEntityNotFoundError,
)
from services.state.change_tracking.implementation import DefaultChangeTrackingService
from services.state.change_tracking.registry import (
    TrackedFieldRegistry,
    default_registry,
)
from services.state.change_tracking.service import (
    ChangeTrackingService,
    build_change_tracking_service,
)
from services.state.change_tracking.tracking import TrackedEntityStore

__all__ = [
    "SERVICE_COMPONENT_ID",
    "ChangeContext",
    "ChangeKind",
    "ChangeQuery",
    "ChangeRecord",
    "ChangeTrackingError",
    "ChangeTrackingService",
    "ChangeTrackingSettings",
    "ChangeTrackingStorageError",
    "DefaultChangeTrackingService",
    "LogicalChangeKind",
    "ReferenceSnapshot",
    "Snapshot",
    "SnapshotUnavailableError",
    "TenantIsolationError",
    "TrackedEntityNotFoundError",
    "TrackedEntityStore",
    "TrackedFieldRegistry",
    "build_change_tracking_service",
    "default_registry",
    "resolve_change_tracking_settings",
]
