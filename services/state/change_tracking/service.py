"""Authoritative in-process Python API for the change-tracking service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from packages.trail_shared.config import TrailSettings
from services.state.change_tracking.domain import (
    ChangeContext,
    ChangeKind,
    ChangeRecord,
)
from services.state.change_tracking.interfaces import EntityRow, EntityStore


class ChangeTrackingService(ABC):
    """Public API for tracked entity mutations and change-trail reads.

    Every mutation runs in one transaction covering the entity write and all
    change records it produces.
    """

    @abstractmethod
    def create_entity(
        self,
        entity_type: str,
        *,
        tenant_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        """Create one entity and record its ``CREATED`` change."""

    @abstractmethod
    def update_entity(
        self,
        entity_type: str,
        *,
        tenant_id: str,
        entity_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        """Update one entity and record one change per changed tracked field."""

    @abstractmethod
    def list_changes(
        self,
        tenant_id: str,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        since: datetime | None = None,
    ) -> list[ChangeRecord]:
        """Return a tenant's changes oldest first."""

    @abstractmethod
    def entity_history(
        self, tenant_id: str, entity_type: str, entity_id: str
    ) -> list[ChangeRecord]:
        """Return every change of one entity oldest first."""

    @abstractmethod
    def recent_changes(
        self, tenant_id: str, *, limit: int | None = None
    ) -> list[ChangeRecord]:
        """Return a tenant's latest changes newest first."""

    @abstractmethod
    def changes_by_actor(
        self,
        tenant_id: str,
        actor_id: str,
        *,
        entity_type: str | None = None,
        limit: int | None = None,
    ) -> list[ChangeRecord]:
        """Return changes made by one actor newest first."""

    @abstractmethod
    def changes_by_entity_type(
        self,
        tenant_id: str,
        entity_type: str,
        *,
        change_kind: ChangeKind | None = None,
        limit: int | None = None,
    ) -> list[ChangeRecord]:
        """Return changes of one entity type newest first."""

    @abstractmethod
    def change_stats_by_entity_type(self, tenant_id: str) -> dict[str, int]:
        """Return change counts per entity type."""


def build_change_tracking_service(
    *,
    settings: TrailSettings,
    store: EntityStore | None = None,
) -> ChangeTrackingService:
    """Build the default service from typed settings.

    ``store`` defaults to the SQL entity store over the same runtime.
    """
    from services.state.change_tracking.config import (
        resolve_change_tracking_settings,
    )
    from services.state.change_tracking.data.repository import (
        SqlChangeRecordRepository,
    )
    from services.state.change_tracking.data.runtime import ChangeTrackingRuntime
    from services.state.change_tracking.data.unit_of_work import (
        ChangeTrackingUnitOfWork,
    )
    from services.state.change_tracking.implementation import (
        DefaultChangeTrackingService,
    )
    from services.state.entity_store import SqlEntityStore

    resolved = resolve_change_tracking_settings(settings)
    runtime = ChangeTrackingRuntime.from_settings(settings)
    return DefaultChangeTrackingService(
        settings=resolved,
        unit_of_work=ChangeTrackingUnitOfWork(runtime.sessions),
        store=(
            SqlEntityStore(isolate_reference_lookups=resolved.isolate_reference_lookups)
            if store is None
            else store
        ),
        repository=SqlChangeRecordRepository(),
    )
