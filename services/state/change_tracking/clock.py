"""Strictly increasing UTC timestamps for change records."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

_TICK = timedelta(microseconds=1)


def _system_now() -> datetime:
    return datetime.now(UTC)


class MonotonicUtcClock:
    """Hand out UTC timestamps that never repeat or go backwards.

    When the wall clock stalls or steps back, the previous value plus one
    microsecond is returned instead.
    """

    def __init__(self, now: Callable[[], datetime] = _system_now) -> None:
        self._now = now
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def now(self) -> datetime:
        with self._lock:
            candidate = self._now().astimezone(UTC)
            if self._last is not None and candidate <= self._last:
                candidate = self._last + _TICK
            self._last = candidate
            return candidate


_PROCESS_CLOCK = MonotonicUtcClock()


def process_clock() -> MonotonicUtcClock:
    """Return the clock shared by every writer in this process."""
    return _PROCESS_CLOCK
