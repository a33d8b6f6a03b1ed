"""Change-record writer."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from packages.trail_shared.ids import generate_ulid_str
from packages.trail_shared.logging import get_logger
from services.state.change_tracking.clock import MonotonicUtcClock, process_clock
from services.state.change_tracking.domain import ChangeDraft, ChangeRecord
from services.state.change_tracking.interfaces import ChangeRecordRepository

_LOGGER = get_logger(__name__)


class ChangeRecordWriter:
    """Stamp drafts with id and time, then insert them in the caller's session."""

    def __init__(
        self,
        *,
        repository: ChangeRecordRepository,
        clock: MonotonicUtcClock | None = None,
    ) -> None:
        self._repository = repository
        self._clock = process_clock() if clock is None else clock

    def write(
        self, session: Session, drafts: Sequence[ChangeDraft]
    ) -> tuple[ChangeRecord, ...]:
        written: list[ChangeRecord] = []
        for draft in drafts:
            occurred_at = self._clock.now()
            record = ChangeRecord(
                id=generate_ulid_str(timestamp_ms=int(occurred_at.timestamp() * 1000)),
                occurred_at=occurred_at,
                **dict(draft),
            )
            self._repository.insert(session, record)
            written.append(record)
            _LOGGER.debug(
                "change record written: entity_type=%s entity_id=%s change_kind=%s "
                "changed_field=%s",
                record.entity_type,
                record.entity_id,
                record.change_kind.value,
                record.changed_field,
            )
        return tuple(written)
