"""SQL persistence for the change trail.

Module-level functions take the caller's session so record writes share the
transaction of the entity mutation. ``SqlChangeRecordRepository`` wraps them
for injection. No update or delete operation exists.
"""

from __future__ import annotations

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

from services.state.change_tracking.data.mappers import (
    as_utc,
    record_to_row,
    row_to_record,
)
from services.state.change_tracking.data.schema import change_records
from services.state.change_tracking.domain import ChangeQuery, ChangeRecord


def insert_change_record(session: Session, record: ChangeRecord) -> None:
    """Insert one change record."""
    session.execute(insert(change_records).values(**record_to_row(record)))


def list_change_records(session: Session, query: ChangeQuery) -> list[ChangeRecord]:
    """Return one tenant's records matching ``query``.

    Ordering is ``(occurred_at, id)``, descending when ``newest_first``.
    """
    stmt = select(change_records).where(change_records.c.tenant_id == query.tenant_id)
    if query.entity_type is not None:
        stmt = stmt.where(change_records.c.entity_type == query.entity_type)
    if query.entity_id is not None:
        stmt = stmt.where(change_records.c.entity_id == query.entity_id)
    if query.since is not None:
        stmt = stmt.where(change_records.c.occurred_at >= as_utc(query.since))
    if query.change_kind is not None:
        stmt = stmt.where(change_records.c.change_kind == query.change_kind.value)
    if query.actor_id is not None:
        stmt = stmt.where(change_records.c.actor_id == query.actor_id)

    if query.newest_first:
        stmt = stmt.order_by(
            change_records.c.occurred_at.desc(), change_records.c.id.desc()
        )
    else:
        stmt = stmt.order_by(change_records.c.occurred_at.asc(), change_records.c.id.asc())
    if query.limit is not None:
        stmt = stmt.limit(query.limit)

    rows = session.execute(stmt).mappings().all()
    return [row_to_record(row) for row in rows]


def count_changes_by_entity_type(session: Session, *, tenant_id: str) -> dict[str, int]:
    """Return per-entity-type record counts for one tenant."""
    stmt = (
        select(change_records.c.entity_type, func.count())
        .where(change_records.c.tenant_id == tenant_id)
        .group_by(change_records.c.entity_type)
        .order_by(change_records.c.entity_type)
    )
    return {str(entity_type): int(count) for entity_type, count in session.execute(stmt)}


class SqlChangeRecordRepository:
    """Repository wrapper over the change-record SQL helpers."""

    def insert(self, session: Session, record: ChangeRecord) -> None:
        insert_change_record(session, record)

    def list_records(self, session: Session, query: ChangeQuery) -> list[ChangeRecord]:
        return list_change_records(session, query)

    def count_by_entity_type(self, session: Session, *, tenant_id: str) -> dict[str, int]:
        return count_changes_by_entity_type(session, tenant_id=tenant_id)
