"""State classifier mapping snapshot diffs to change drafts."""

from __future__ import annotations

from collections.abc import Sequence

from services.state.change_tracking.domain import (
    ChangeContext,
    ChangeDraft,
    ChangeKind,
    FieldDiff,
    Snapshot,
)


class StateClassifier:
    """Classify creations, updates, soft deletes and restores.

    Soft deletes stay ``UPDATED`` in storage; ``ChangeRecord.logical_kind``
    reports them as ``DELETED``.
    """

    def __init__(self, *, active_flag_field: str = "is_active") -> None:
        self._active_flag_field = active_flag_field

    def kind_for(self, diff: FieldDiff) -> ChangeKind:
        if (
            diff.field == self._active_flag_field
            and diff.before is False
            and diff.after is True
        ):
            return ChangeKind.RESTORED
        return ChangeKind.UPDATED

    def classify(
        self,
        *,
        tenant_id: str,
        entity_type: str,
        entity_id: str,
        before: Snapshot | None,
        after: Snapshot,
        diffs: Sequence[FieldDiff],
        context: ChangeContext | None = None,
    ) -> list[ChangeDraft]:
        """Return one draft per diff, or a single ``CREATED`` draft."""
        actor_id = None if context is None else context.actor_id
        reason = None if context is None else context.reason

        if before is None:
            return [
                ChangeDraft(
                    tenant_id=tenant_id,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    change_kind=ChangeKind.CREATED,
                    after_snapshot=after,
                    actor_id=actor_id,
                    reason=reason,
                )
            ]

        return [
            ChangeDraft(
                tenant_id=tenant_id,
                entity_type=entity_type,
                entity_id=entity_id,
                change_kind=self.kind_for(diff),
                changed_field=diff.field,
                before_snapshot=before,
                after_snapshot=after,
                actor_id=actor_id,
                reason=reason,
            )
            for diff in diffs
        ]
