"""Sessions pinned to the schema that owns the change trail."""

from __future__ import annotations

import re

from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from resources.substrates.postgres.session import TransactionalSessionProvider

# Unquoted Postgres identifier, within NAMEDATALEN.
_SCHEMA_NAME = re.compile(r"[a-z_][a-z0-9_]{0,62}")


def validate_schema_name(schema: str) -> str:
    """Return ``schema`` if it is safe to interpolate into DDL and ``search_path``."""
    if not _SCHEMA_NAME.fullmatch(schema or ""):
        raise ValueError(
            f"invalid postgres schema name {schema!r}: "
            "expected lowercase letters, digits and underscores"
        )
    return schema


class ServiceSchemaSessionProvider(TransactionalSessionProvider):
    def __init__(self, *, session_factory: sessionmaker[Session], schema: str) -> None:
        super().__init__(session_factory=session_factory)
        self._schema = validate_schema_name(schema)

    @property
    def schema(self) -> str:
        return self._schema

    def _prepare(self, session: Session) -> None:
        # SET LOCAL lasts only for the current transaction.
        session.execute(text(f"SET LOCAL search_path TO {self._schema}, public"))
