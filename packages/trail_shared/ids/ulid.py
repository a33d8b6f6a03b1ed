"""ULID conversion and generation helpers.

Canonical string form is 26 Crockford Base32 characters encoding 128 bits;
canonical binary form is 16 big-endian bytes. Entity ids travel as strings and
change-record ids are stored as binary.
"""

from __future__ import annotations

import secrets
import time

_ULID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_DECODE_TABLE = {char: index for index, char in enumerate(_ULID_ALPHABET)}
_MAX_ULID_INT = (1 << 128) - 1
ULID_BYTES_LENGTH = 16
ULID_STR_LENGTH = 26


def ulid_str_to_bytes(value: str) -> bytes:
    """Decode a canonical 26-char ULID string into 16-byte big-endian form."""
    candidate = value.strip().upper()
    if len(candidate) != ULID_STR_LENGTH:
        raise ValueError("ULID string must be exactly 26 characters")

    number = 0
    for char in candidate:
        if char not in _DECODE_TABLE:
            raise ValueError(f"Invalid ULID character: {char!r}")
        number = (number << 5) | _DECODE_TABLE[char]

    # 26 base32 chars carry 130 bits; only the low 128 are valid.
    if number > _MAX_ULID_INT:
        raise ValueError("ULID value exceeds 128-bit range")
    return number.to_bytes(ULID_BYTES_LENGTH, byteorder="big", signed=False)


def ulid_bytes_to_str(value: bytes) -> str:
    """Encode 16-byte big-endian ULID into its canonical string."""
    if len(value) != ULID_BYTES_LENGTH:
        raise ValueError("ULID bytes must be exactly 16 bytes")

    number = int.from_bytes(value, byteorder="big", signed=False)
    chars: list[str] = []
    for _ in range(ULID_STR_LENGTH):
        number, remainder = divmod(number, 32)
        chars.append(_ULID_ALPHABET[remainder])
    return "".join(reversed(chars))


def generate_ulid_bytes(*, timestamp_ms: int | None = None) -> bytes:
    """Generate a ULID as 16 bytes: 48-bit millisecond time plus 80 random bits."""
    ts_ms = int(time.time() * 1000) if timestamp_ms is None else int(timestamp_ms)
    if ts_ms < 0 or ts_ms >= (1 << 48):
        raise ValueError("timestamp_ms out of ULID 48-bit range")

    entropy = int.from_bytes(secrets.token_bytes(10), byteorder="big", signed=False)
    number = (ts_ms << 80) | entropy
    return number.to_bytes(ULID_BYTES_LENGTH, byteorder="big", signed=False)


def generate_ulid_str(*, timestamp_ms: int | None = None) -> str:
    """Generate a new ULID in canonical string form."""
    return ulid_bytes_to_str(generate_ulid_bytes(timestamp_ms=timestamp_ms))

