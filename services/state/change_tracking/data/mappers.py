"""Mapping helpers between change-record rows and domain models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Mapping

from packages.trail_shared.ids import ulid_bytes_to_str, ulid_str_to_bytes
from services.state.change_tracking.domain import ChangeKind, ChangeRecord, Snapshot


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def record_to_row(record: ChangeRecord) -> dict[str, Any]:
    """Map one domain record into an insertable row."""
    return {
        "id": ulid_str_to_bytes(record.id),
        "tenant_id": record.tenant_id,
        "entity_type": record.entity_type,
        "entity_id": record.entity_id,
        "change_kind": record.change_kind.value,
        "changed_field": record.changed_field,
        "before_snapshot": (
            None
            if record.before_snapshot is None
            else record.before_snapshot.model_dump(mode="json")
        ),
        "after_snapshot": record.after_snapshot.model_dump(mode="json"),
        "actor_id": record.actor_id,
        "reason": record.reason,
        "occurred_at": as_utc(record.occurred_at),
    }


def row_to_record(row: Mapping[str, Any]) -> ChangeRecord:
    """Map one stored row into a domain record."""
    before = row["before_snapshot"]
    return ChangeRecord(
        id=ulid_bytes_to_str(bytes(row["id"])),
        tenant_id=str(row["tenant_id"]),
        entity_type=str(row["entity_type"]),
        entity_id=str(row["entity_id"]),
        change_kind=ChangeKind(row["change_kind"]),
        changed_field=row["changed_field"],
        before_snapshot=None if before is None else Snapshot.model_validate(before),
        after_snapshot=Snapshot.model_validate(row["after_snapshot"]),
        actor_id=row["actor_id"],
        reason=row["reason"],
        occurred_at=as_utc(row["occurred_at"]),
    )
