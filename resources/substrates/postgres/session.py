"""Transaction-scoped session helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions keep loaded values readable after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit when the block exits cleanly, roll back and re-raise otherwise."""
    with session_factory() as session:
        try:
            yield session
        except BaseException:
            session.rollback()
            raise
        session.commit()


class TransactionalSessionProvider:
    """One session and one transaction per ``session()`` block."""

    def __init__(self, *, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        with transactional_session(self._session_factory) as db:
            self._prepare(db)
            yield db

    def _prepare(self, session: Session) -> None:
        """Hook for per-transaction setup before the caller's statements."""
