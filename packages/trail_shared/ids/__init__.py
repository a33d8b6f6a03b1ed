"""Shared ULID primitives for identifiers and binary primary keys."""

from packages.trail_shared.ids.sqlalchemy import (
    ulid_primary_key_column,
    ulid_string_column,
)
from packages.trail_shared.ids.ulid import (
    ULID_BYTES_LENGTH,
    ULID_STR_LENGTH,
    generate_ulid_bytes,
    generate_ulid_str,
    ulid_bytes_to_str,
    ulid_str_to_bytes,
)

__all__ = [
    "ULID_BYTES_LENGTH",
    "ULID_STR_LENGTH",
    "generate_ulid_bytes",
    "generate_ulid_str",
    "ulid_bytes_to_str",
    "ulid_primary_key_column",
    "ulid_str_to_bytes",
    "ulid_string_column",
]
