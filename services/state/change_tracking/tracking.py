"""Interception wrapper that records changes around entity-store mutations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.orm import Session

from packages.trail_shared.logging import entity_context, fields, get_logger
from services.state.change_tracking.classifier import StateClassifier
from services.state.change_tracking.config import ChangeTrackingSettings
from services.state.change_tracking.diffing import diff_snapshots
from services.state.change_tracking.domain import ChangeContext, ChangeDraft, ChangeRecord
from services.state.change_tracking.errors import (
    SnapshotUnavailableError,
    TenantIsolationError,
    TrackedEntityNotFoundError,
)
from services.state.change_tracking.interfaces import EntityRow, EntityStore
from services.state.change_tracking.registry import TrackedFieldRegistry
from services.state.change_tracking.snapshots import SnapshotBuilder
from services.state.change_tracking.writer import ChangeRecordWriter

_LOGGER = get_logger(__name__)


class TrackedEntityStore:
    """Entity store decorator that writes change records for tracked types.

    Mutations run fetch-before, mutate, fetch-after, diff, classify and write
    on the caller's session. Untracked types and disabled tracking delegate
    straight to the wrapped store.
    """

    def __init__(
        self,
        *,
        store: EntityStore,
        registry: TrackedFieldRegistry,
        writer: ChangeRecordWriter,
        settings: ChangeTrackingSettings,
    ) -> None:
        if registry.active_flag_field != settings.active_flag_field:
            raise ValueError(
                "registry active flag "
                f"{registry.active_flag_field!r} does not match settings "
                f"{settings.active_flag_field!r}"
            )
        self._store = store
        self._registry = registry
        self._writer = writer
        self._settings = settings
        self._snapshots = SnapshotBuilder(registry=registry, resolver=store)
        self._classifier = StateClassifier(active_flag_field=settings.active_flag_field)

    @property
    def tracking_enabled(self) -> bool:
        return self._settings.tracking_enabled

    def create(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        created = self._store.create(
            session, entity_type=entity_type, tenant_id=tenant_id, values=values
        )
        if not self._intercepts(entity_type):
            return created

        entity_id = str(created["id"])
        with entity_context(entity_type, entity_id):
            after_row = self._fetch_after(
                session, entity_type=entity_type, tenant_id=tenant_id, entity_id=entity_id
            )
            owner = self._owning_tenant(
                after_row, entity_type=entity_type, entity_id=entity_id, tenant_id=tenant_id
            )
            after = self._snapshots.build(
                session, entity_type=entity_type, tenant_id=owner, row=after_row
            )
            drafts = self._classifier.classify(
                tenant_id=owner,
                entity_type=entity_type,
                entity_id=entity_id,
                before=None,
                after=after,
                diffs=(),
                context=context,
            )
            self._write(session, drafts)
        return after_row

    def update(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        values: Mapping[str, Any],
        context: ChangeContext | None = None,
    ) -> EntityRow:
        if not self._intercepts(entity_type):
            return self._store.update(
                session,
                entity_type=entity_type,
                tenant_id=tenant_id,
                entity_id=entity_id,
                values=values,
            )

        with entity_context(entity_type, entity_id):
            # Lock the row so concurrent updates diff against committed state.
            before_row = self._store.get(
                session,
                entity_type=entity_type,
                tenant_id=tenant_id,
                entity_id=entity_id,
                for_update=True,
            )
            if before_row is None:
                raise TrackedEntityNotFoundError(
                    entity_type=entity_type, entity_id=entity_id
                )
            owner = self._owning_tenant(
                before_row, entity_type=entity_type, entity_id=entity_id, tenant_id=tenant_id
            )
            before = self._snapshots.build(
                session, entity_type=entity_type, tenant_id=owner, row=before_row
            )

            self._store.update(
                session,
                entity_type=entity_type,
                tenant_id=tenant_id,
                entity_id=entity_id,
                values=values,
            )

            after_row = self._fetch_after(
                session, entity_type=entity_type, tenant_id=tenant_id, entity_id=entity_id
            )
            after = self._snapshots.build(
                session, entity_type=entity_type, tenant_id=owner, row=after_row
            )
            diffs = diff_snapshots(before, after, self._registry.fields_for(entity_type))
            drafts = self._classifier.classify(
                tenant_id=owner,
                entity_type=entity_type,
                entity_id=entity_id,
                before=before,
                after=after,
                diffs=diffs,
                context=context,
            )
            self._write(session, drafts)
        return after_row

    def get(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        for_update: bool = False,
    ) -> EntityRow | None:
        return self._store.get(
            session,
            entity_type=entity_type,
            tenant_id=tenant_id,
            entity_id=entity_id,
            for_update=for_update,
        )

    def get_reference(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        attributes: Sequence[str],
    ) -> Mapping[str, Any] | None:
        return self._store.get_reference(
            session,
            entity_type=entity_type,
            tenant_id=tenant_id,
            entity_id=entity_id,
            attributes=attributes,
        )

    def _intercepts(self, entity_type: str) -> bool:
        return self._settings.tracking_enabled and self._registry.is_tracked(entity_type)

    def _fetch_after(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
    ) -> EntityRow:
        row = self._store.get(
            session, entity_type=entity_type, tenant_id=tenant_id, entity_id=entity_id
        )
        if row is None:
            _LOGGER.error("entity unreadable after mutation")
            raise SnapshotUnavailableError(entity_type=entity_type, entity_id=entity_id)
        return row

    def _owning_tenant(
        self,
        row: Mapping[str, Any],
        *,
        entity_type: str,
        entity_id: str,
        tenant_id: str,
    ) -> str:
        """Return the row's tenant, or the caller's for global reference types."""
        row_tenant = row.get("tenant_id")
        if row_tenant is None:
            return tenant_id
        if str(row_tenant) != tenant_id:
            raise TenantIsolationError(
                entity_type=entity_type, entity_id=entity_id, tenant_id=tenant_id
            )
        return str(row_tenant)

    def _write(
        self, session: Session, drafts: Sequence[ChangeDraft]
    ) -> tuple[ChangeRecord, ...]:
        records = self._writer.write(session, drafts)
        _LOGGER.info("changes recorded", extra={fields.RECORD_COUNT: len(records)})
        return records
