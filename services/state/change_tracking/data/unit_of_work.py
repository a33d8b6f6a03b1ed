"""Transactional unit-of-work wrapper for change-tracking operations."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Protocol, TypeVar

from sqlalchemy.orm import Session

T = TypeVar("T")


class SessionProvider(Protocol):
    """Source of transaction-scoped sessions."""

    def session(self) -> AbstractContextManager[Session]:
        """Yield a session committed on success and rolled back on error."""


class ChangeTrackingUnitOfWork:
    """Execute one mutation and its change records inside one transaction."""

    def __init__(self, sessions: SessionProvider) -> None:
        self._sessions = sessions

    def run(self, fn: Callable[[Session], T]) -> T:
        """Run one callback in a transaction with session access."""
        with self._sessions.session() as session:
            return fn(session)
