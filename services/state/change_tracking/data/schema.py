"""SQLAlchemy table definitions owned by the change-tracking service."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB

from packages.trail_shared.ids import ulid_primary_key_column

metadata = MetaData()

_SNAPSHOT_DOCUMENT = JSON(none_as_null=True).with_variant(
    JSONB(none_as_null=True), "postgresql"
)

change_records = Table(
    "change_records",
    metadata,
    ulid_primary_key_column("id", table_name="change_records"),
    Column("tenant_id", String(64), nullable=False),
    Column("entity_type", String(64), nullable=False),
    Column("entity_id", String(64), nullable=False),
    Column("change_kind", String(16), nullable=False),
    Column("changed_field", String(128), nullable=True),
    Column("before_snapshot", _SNAPSHOT_DOCUMENT, nullable=True),
    Column("after_snapshot", _SNAPSHOT_DOCUMENT, nullable=False),
    Column("actor_id", String(128), nullable=True),
    Column("reason", Text, nullable=True),
    Column("occurred_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(
        "change_kind IN ('CREATED', 'UPDATED', 'RESTORED')",
        name="ck_change_records_change_kind",
    ),
    CheckConstraint(
        "(change_kind = 'CREATED' AND changed_field IS NULL) "
        "OR (change_kind <> 'CREATED' AND changed_field IS NOT NULL)",
        name="ck_change_records_changed_field",
    ),
    Index(
        "ix_change_records_tenant_entity_time",
        "tenant_id",
        "entity_type",
        "entity_id",
        "occurred_at",
    ),
    Index("ix_change_records_tenant_time", "tenant_id", "occurred_at"),
    Index("ix_change_records_occurred_at", "occurred_at"),
)
