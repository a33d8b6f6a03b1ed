"""Default change-tracking service implementation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from packages.trail_shared.config import TrailSettings
from packages.trail_shared.logging import fields, get_logger, log_context
from services.state.change_tracking.clock import MonotonicUtcClock
from services.state.change_tracking.config import ChangeTrackingSettings
from services.state.change_tracking.domain import (
    ChangeContext,
    ChangeKind,
    ChangeQuery,
    ChangeRecord,
)
from services.state.change_tracking.errors import (
    ChangeTrackingError,
    ChangeTrackingStorageError,
)
from services.state.change_tracking.interfaces import (
    ChangeRecordRepository,
    EntityRow,
    EntityStore,
    UnitOfWork,
)
from services.state.change_tracking.registry import (
    TrackedFieldRegistry,
    default_registry,
)
from services.state.change_tracking.service import (
    ChangeTrackingService,
    build_change_tracking_service,
)
from services.state.change_tracking.tracking import TrackedEntityStore
from services.state.change_tracking.writer import ChangeRecordWriter

_LOGGER = get_logger(__name__)

T = TypeVar("T")


class DefaultChangeTrackingService(ChangeTrackingService):
    """Change-tracking service over a unit of work and a wrapped entity store."""

    def __init__(
        self,
        *,
        settings: ChangeTrackingSettings,
        unit_of_work: UnitOfWork,
        store: EntityStore,
        repository: ChangeRecordRepository,
        registry: TrackedFieldRegistry | None = None,
        clock: MonotonicUtcClock | None = None,
    ) -> None:
        self._settings = settings
        self._unit_of_work = unit_of_work
        self._repository = repository
        self._registry = (
            default_registry(active_flag_field=settings.active_flag_field)
            if registry is None
            else registry
        )
        self._tracked = TrackedEntityStore(
            store=store,
            registry=self._registry,
            writer=ChangeRecordWriter(repository=repository, clock=clock),
            settings=settings,
        )

    @classmethod
    def from_settings(cls, settings: TrailSettings) -> ChangeTrackingService:
        """Build the service from root settings and the shared runtime."""
        return build_change_tracking_service(settings=settings)

    @property
    def registry(self) -> TrackedFieldRegistry:
        return self._registry

    def create_entity(
        self,
        entity_type: str,
        *,
        tenant_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        return self._mutate(
            "create_entity",
            tenant_id=tenant_id,
            entity_type=entity_type,
            context=context,
            fn=lambda session: self._tracked.create(
                session,
                entity_type=entity_type,
                tenant_id=tenant_id,
                values=values,
                context=context,
            ),
        )

    def update_entity(
        self,
        entity_type: str,
        *,
        tenant_id: str,
        entity_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        return self._mutate(
            "update_entity",
            tenant_id=tenant_id,
            entity_type=entity_type,
            context=context,
            fn=lambda session: self._tracked.update(
                session,
                entity_type=entity_type,
                tenant_id=tenant_id,
                entity_id=entity_id,
                values=values,
                context=context,
            ),
        )

    def list_changes(
        self,
        tenant_id: str,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        since: datetime | None = None,
    ) -> list[ChangeRecord]:
        return self._query(
            ChangeQuery(
                tenant_id=tenant_id,
                entity_type=entity_type,
                entity_id=entity_id,
                since=since,
            )
        )

    def entity_history(
        self, tenant_id: str, entity_type: str, entity_id: str
    ) -> list[ChangeRecord]:
        return self.list_changes(tenant_id, entity_type=entity_type, entity_id=entity_id)

    def recent_changes(
        self, tenant_id: str, *, limit: int | None = None
    ) -> list[ChangeRecord]:
        return self._query(
            ChangeQuery(
                tenant_id=tenant_id,
                limit=self._clamp_limit(limit, default=self._settings.recent_changes_limit),
                newest_first=True,
            )
        )

    def changes_by_actor(
        self,
        tenant_id: str,
        actor_id: str,
        *,
        entity_type: str | None = None,
        limit: int | None = None,
    ) -> list[ChangeRecord]:
        return self._query(
            ChangeQuery(
                tenant_id=tenant_id,
                actor_id=actor_id,
                entity_type=entity_type,
                limit=self._clamp_limit(limit, default=self._settings.default_query_limit),
                newest_first=True,
            )
        )

    def changes_by_entity_type(
        self,
        tenant_id: str,
        entity_type: str,
        *,
        change_kind: ChangeKind | None = None,
        limit: int | None = None,
    ) -> list[ChangeRecord]:
        return self._query(
            ChangeQuery(
                tenant_id=tenant_id,
                entity_type=entity_type,
                change_kind=change_kind,
                limit=self._clamp_limit(limit, default=self._settings.default_query_limit),
                newest_first=True,
            )
        )

    def change_stats_by_entity_type(self, tenant_id: str) -> dict[str, int]:
        return self._run(
            "change_stats_by_entity_type",
            lambda session: self._repository.count_by_entity_type(
                session, tenant_id=tenant_id
            ),
        )

    def _mutate(
        self,
        operation: str,
        *,
        tenant_id: str,
        entity_type: str,
        context: ChangeContext | None,
        fn: Callable[[Session], T],
    ) -> T:
        with log_context(
            {
                fields.OPERATION: operation,
                fields.TENANT_ID: tenant_id,
                fields.ENTITY_TYPE: entity_type,
                fields.ACTOR_ID: None if context is None else context.actor_id,
            }
        ):
            return self._run(operation, fn)

    def _query(self, query: ChangeQuery) -> list[ChangeRecord]:
        return self._run(
            "list_changes",
            lambda session: self._repository.list_records(session, query),
        )

    def _run(self, operation: str, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` in one transaction, normalizing storage failures."""
        try:
            return self._unit_of_work.run(fn)
        except ChangeTrackingError as exc:
            _LOGGER.warning(
                "change tracking operation failed: operation=%s code=%s",
                operation,
                exc.error.code,
            )
            raise
        except SQLAlchemyError as exc:
            _LOGGER.error(
                "change tracking storage failure: operation=%s exception_type=%s",
                operation,
                type(exc).__name__,
                exc_info=exc,
            )
            raise ChangeTrackingStorageError.from_exception(exc) from exc

    def _clamp_limit(self, limit: int | None, *, default: int) -> int:
        """Clamp list limits to the configured max."""
        if limit is None or limit <= 0:
            return min(default, self._settings.max_query_limit)
        return min(limit, self._settings.max_query_limit)
