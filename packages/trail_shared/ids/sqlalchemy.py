"""SQLAlchemy helpers for ULID-backed columns."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, LargeBinary, String

from packages.trail_shared.ids.ulid import ULID_BYTES_LENGTH, ULID_STR_LENGTH


def ulid_primary_key_column(
    name: str = "id",
    *,
    table_name: str,
) -> Column[bytes]:
    """Return a binary ULID primary-key column with a 16-byte length check.

    ``length()`` counts bytes for binary values on both Postgres ``BYTEA`` and
    SQLite ``BLOB`` storage.
    """
    constraint = CheckConstraint(
        f"length({name}) = {ULID_BYTES_LENGTH}",
        name=f"ck_{table_name}_{name}_ulid_16",
    )
    return Column(
        name,
        LargeBinary(ULID_BYTES_LENGTH),
        constraint,
        primary_key=True,
        nullable=False,
    )


def ulid_string_column(name: str, *args: object, **kwargs: object) -> Column[str]:
    """Return a column holding canonical 26-char ULID strings."""
    return Column(name, String(ULID_STR_LENGTH), *args, **kwargs)
