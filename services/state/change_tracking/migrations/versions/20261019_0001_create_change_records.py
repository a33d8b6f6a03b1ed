"""create change records table"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _snapshot_type() -> sa.types.TypeEngine:
    """Return JSONB on Postgres and generic JSON elsewhere."""
    return sa.JSON(none_as_null=True).with_variant(
        postgresql.JSONB(none_as_null=True), "postgresql"
    )


def upgrade() -> None:
    """Create the append-only change trail."""
    op.create_table(
        "change_records",
        sa.Column("id", sa.LargeBinary(length=16), primary_key=True, nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("change_kind", sa.String(length=16), nullable=False),
        sa.Column("changed_field", sa.String(length=128), nullable=True),
        sa.Column("before_snapshot", _snapshot_type(), nullable=True),
        sa.Column("after_snapshot", _snapshot_type(), nullable=False),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("length(id) = 16", name="ck_change_records_id_ulid_16"),
        sa.CheckConstraint(
            "change_kind IN ('CREATED', 'UPDATED', 'RESTORED')",
            name="ck_change_records_change_kind",
        ),
        sa.CheckConstraint(
            "(change_kind = 'CREATED' AND changed_field IS NULL) "
            "OR (change_kind <> 'CREATED' AND changed_field IS NOT NULL)",
            name="ck_change_records_changed_field",
        ),
    )
    op.create_index(
        "ix_change_records_tenant_entity_time",
        "change_records",
        ["tenant_id", "entity_type", "entity_id", "occurred_at"],
    )
    op.create_index(
        "ix_change_records_tenant_time",
        "change_records",
        ["tenant_id", "occurred_at"],
    )
    op.create_index(
        "ix_change_records_occurred_at",
        "change_records",
        ["occurred_at"],
    )


def downgrade() -> None:
    """Drop the change trail."""
    op.drop_index("ix_change_records_occurred_at", table_name="change_records")
    op.drop_index("ix_change_records_tenant_time", table_name="change_records")
    op.drop_index("ix_change_records_tenant_entity_time", table_name="change_records")
    op.drop_table("change_records")
