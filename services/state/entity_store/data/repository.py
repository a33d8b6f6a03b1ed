"""SQL entity store over SQLAlchemy Core tables."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Executable, Table, insert, select, update
from sqlalchemy.orm import Session

from packages.trail_shared.ids import generate_ulid_str
from packages.trail_shared.logging import get_logger
from services.state.entity_store.data.schema import (
    ENTITY_TABLES,
    GLOBAL_ENTITY_TYPES,
    SYSTEM_COLUMNS,
)
from services.state.entity_store.errors import (
    EntityNotFoundError,
    UnknownEntityTypeError,
)

_LOGGER = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlEntityStore:
    """Tenant-aware create/update/get over the business entity tables.

    Every call runs on the caller's session; transaction boundaries belong to
    the caller. Global reference types ignore the tenant filter.

    ``isolate_reference_lookups`` wraps each reference lookup in a savepoint so
    a failed lookup leaves the outer transaction usable. ``None`` enables it on
    Postgres only.
    """

    def __init__(
        self,
        *,
        isolate_reference_lookups: bool | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._isolate_reference_lookups = isolate_reference_lookups
        self._now = now

    def create(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        values: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Insert one entity row and return it as read back from storage."""
        table = _table_for(entity_type)
        payload = _validated_values(table, entity_type=entity_type, values=values)
        entity_id = generate_ulid_str()
        now = self._now()
        payload.update({"id": entity_id, "created_at": now, "updated_at": now})
        if _is_tenant_scoped(entity_type):
            payload["tenant_id"] = tenant_id

        session.execute(insert(table).values(**payload))
        _LOGGER.debug(
            "entity created: entity_type=%s entity_id=%s", entity_type, entity_id
        )
        created = self.get(
            session, entity_type=entity_type, tenant_id=tenant_id, entity_id=entity_id
        )
        if created is None:
            raise EntityNotFoundError(entity_type, entity_id)
        return created

    def update(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        values: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Apply a partial update to one row and return the updated row."""
        table = _table_for(entity_type)
        payload = _validated_values(table, entity_type=entity_type, values=values)
        payload["updated_at"] = self._now()

        stmt = (
            update(table)
            .where(*_row_filter(table, entity_type, tenant_id, entity_id))
            .values(**payload)
        )
        result = session.execute(stmt)
        if result.rowcount == 0:
            raise EntityNotFoundError(entity_type, entity_id)

        updated = self.get(
            session, entity_type=entity_type, tenant_id=tenant_id, entity_id=entity_id
        )
        if updated is None:
            raise EntityNotFoundError(entity_type, entity_id)
        return updated

    def get(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        for_update: bool = False,
    ) -> dict[str, Any] | None:
        """Read one row visible to ``tenant_id``.

        ``for_update`` takes a row lock until the transaction ends; SQLite
        ignores it.
        """
        table = _table_for(entity_type)
        stmt = select(table).where(*_row_filter(table, entity_type, tenant_id, entity_id))
        if for_update:
            stmt = stmt.with_for_update()
        row = session.execute(stmt).mappings().one_or_none()
        return None if row is None else dict(row)

    def get_reference(
        self,
        session: Session,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        attributes: Sequence[str],
    ) -> dict[str, Any] | None:
        """Read only ``attributes`` of one referenced row visible to ``tenant_id``."""
        table = _table_for(entity_type)
        unknown = sorted(set(attributes) - set(table.c.keys()))
        if unknown:
            raise ValueError(f"unknown attributes for {entity_type}: {', '.join(unknown)}")

        stmt = self._reference_statement(
            table,
            entity_type=entity_type,
            tenant_id=tenant_id,
            entity_id=entity_id,
            attributes=attributes,
        )
        if self.isolates_reference_lookups(session):
            with session.begin_nested():
                row = session.execute(stmt).mappings().one_or_none()
        else:
            row = session.execute(stmt).mappings().one_or_none()
        return None if row is None else dict(row)

    def isolates_reference_lookups(self, session: Session) -> bool:
        if self._isolate_reference_lookups is not None:
            return self._isolate_reference_lookups
        return session.get_bind().dialect.name == "postgresql"

    def _reference_statement(
        self,
        table: Table,
        *,
        entity_type: str,
        tenant_id: str,
        entity_id: str,
        attributes: Sequence[str],
    ) -> Executable:
        return select(*(table.c[name] for name in attributes)).where(
            *_row_filter(table, entity_type, tenant_id, entity_id)
        )


def _table_for(entity_type: str) -> Table:
    table = ENTITY_TABLES.get(entity_type)
    if table is None:
        raise UnknownEntityTypeError(entity_type)
    return table


def _is_tenant_scoped(entity_type: str) -> bool:
    return entity_type not in GLOBAL_ENTITY_TYPES


def _row_filter(table: Table, entity_type: str, tenant_id: str, entity_id: str) -> list:
    clauses = [table.c.id == entity_id]
    if _is_tenant_scoped(entity_type):
        clauses.append(table.c.tenant_id == tenant_id)
    return clauses


def _validated_values(
    table: Table, *, entity_type: str, values: Mapping[str, Any]
) -> dict[str, Any]:
    """Reject system columns and names the table does not define."""
    writable = set(table.c.keys()) - SYSTEM_COLUMNS
    unknown = sorted(name for name in values if name not in writable)
    if unknown:
        raise ValueError(f"unknown fields for {entity_type}: {', '.join(unknown)}")
    return dict(values)
