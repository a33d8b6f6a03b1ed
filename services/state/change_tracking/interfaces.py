"""Protocols for collaborators of the change-tracking pipeline."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, TypeVar

from sqlalchemy.orm import Session

from services.state.change_tracking.domain import ChangeQuery, ChangeRecord

T = TypeVar("T")

EntityRow = dict[str, Any]


class ReferenceResolver(Protocol):
    """Minimal lookup used to expand foreign keys in snapshots."""

    def get_reference(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        attributes: Sequence[str],
    ) -> Mapping[str, Any] | None:
        """Return ``attributes`` of one entity visible to ``tenant_id``, or ``None``."""


class EntityStore(ReferenceResolver, Protocol):
    """Tenant-aware persistence for business entities."""

    def create(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        values: Mapping[str, Any],
    ) -> EntityRow:
        """Insert one entity and return the stored row."""

    def update(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        values: Mapping[str, Any],
    ) -> EntityRow:
        """Update one entity and return the stored row."""

    def get(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        for_update: bool = False,
    ) -> EntityRow | None:
        """Read one entity visible to ``tenant_id``, optionally row-locked."""


class ChangeRecordRepository(Protocol):
    """Append-only storage for change records."""

    def insert(self, session: Session, record: ChangeRecord) -> None:
        """Persist one record in the caller's transaction."""

    def list_records(self, session: Session, query: ChangeQuery) -> list[ChangeRecord]:
        """Return records matching ``query`` ordered by time then id."""

    def count_by_entity_type(self, session: Session, *, tenant_id: str) -> dict[str, int]:
        """Return record counts grouped by entity type for one tenant."""


class UnitOfWork(Protocol):
    """Run one callback inside a single transaction."""

    def run(self, fn: Callable[[Session], T]) -> T:
        """Commit when ``fn`` returns, roll back when it raises."""
