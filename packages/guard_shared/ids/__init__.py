"""Shared ULID primitives for identifiers and binary primary keys."""

from packages.guard_shared.ids.sqlalchemy import (
    ULID_BYTES_LENGTH,
    ulid_foreign_key_column,
    ulid_primary_key_column,
)
from packages.guard_shared.ids.ulid import (
    generate_ulid_bytes,
    generate_ulid_str,
    is_ulid_str,
    ulid_bytes_to_str,
    ulid_str_to_bytes,
)

__all__ = [
    "ULID_BYTES_LENGTH",
    "generate_ulid_bytes",
    "generate_ulid_str",
    "is_ulid_str",
    "ulid_bytes_to_str",
    "ulid_foreign_key_column",
    "ulid_primary_key_column",
    "ulid_str_to_bytes",
]
