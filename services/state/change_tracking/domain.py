"""Domain models for change records and their snapshots."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

Scalar = Union[str, int, float, bool, None]


class ChangeKind(str, Enum):
    """Persisted change classification."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    RESTORED = "RESTORED"


class LogicalChangeKind(str, Enum):
    """Read-side classification that separates soft deletes from updates."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"


class ReferenceSnapshot(BaseModel):
    """Stable attributes of one referenced entity at snapshot time."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity_type: str
    id: str
    attributes: dict[str, Scalar] = Field(default_factory=dict)


class Snapshot(BaseModel):
    """Flattened tracked-field state of one entity.

    ``references`` maps a relation name to its expanded sub-object, or to
    ``None`` when the foreign key is null. A relation whose target could not
    be resolved is absent while its raw key stays in ``values``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    values: dict[str, Scalar] = Field(default_factory=dict)
    references: dict[str, ReferenceSnapshot | None] = Field(default_factory=dict)

    def value(self, field: str) -> Scalar:
        return self.values.get(field)


class ChangeContext(BaseModel):
    """Caller-supplied audit context stored verbatim on records."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    actor_id: str | None = None
    reason: str | None = None


class FieldDiff(BaseModel):
    """One tracked field whose value differs between two snapshots."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    field: str
    before: Scalar
    after: Scalar


class ChangeDraft(BaseModel):
    """Classified change awaiting id and timestamp assignment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tenant_id: str
    entity_type: str
    entity_id: str
    change_kind: ChangeKind
    changed_field: str | None = None
    before_snapshot: Snapshot | None = None
    after_snapshot: Snapshot
    actor_id: str | None = None
    reason: str | None = None


class ChangeRecord(ChangeDraft):
    """Immutable persisted audit entry."""

    id: str
    occurred_at: datetime

    @property
    def before_value(self) -> Scalar:
        if self.before_snapshot is None or self.changed_field is None:
            return None
        return self.before_snapshot.value(self.changed_field)

    @property
    def after_value(self) -> Scalar:
        if self.changed_field is None:
            return None
        return self.after_snapshot.value(self.changed_field)

    def logical_kind(self, *, active_flag_field: str = "is_active") -> LogicalChangeKind:
        """Return the record's kind with soft deletes reported as ``DELETED``."""
        if self.change_kind == ChangeKind.CREATED:
            return LogicalChangeKind.CREATED
        if self.change_kind == ChangeKind.RESTORED:
            return LogicalChangeKind.RESTORED
        if self.changed_field == active_flag_field and self.after_value is False:
            return LogicalChangeKind.DELETED
        return LogicalChangeKind.UPDATED


class ChangeQuery(BaseModel):
    """Read filter over the change trail of one tenant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tenant_id: str
    entity_type: str | None = None
    entity_id: str | None = None
    since: datetime | None = None
    change_kind: ChangeKind | None = None
    actor_id: str | None = None
    limit: int | None = Field(default=None, gt=0)
    newest_first: bool = False
