"""Tests for shared ULID conversion and ordering semantics."""

from __future__ import annotations

import pytest

from packages.guard_shared.ids import (
    generate_ulid_bytes,
    generate_ulid_str,
    is_ulid_str,
    ulid_bytes_to_str,
    ulid_str_to_bytes,
)


def test_ulid_string_bytes_conversion_is_lossless() -> None:
    ulid_value = generate_ulid_str()

    assert ulid_bytes_to_str(ulid_str_to_bytes(ulid_value)) == ulid_value


def test_ulid_lexicographic_order_matches_big_endian_binary() -> None:
    """Sorting canonical strings must match sorting binary big-endian ULIDs."""
    values = [generate_ulid_bytes(timestamp_ms=1_700_000_000_000) for _ in range(300)]

    assert sorted(values) == sorted(values, key=ulid_bytes_to_str)


def test_lowercase_ulid_decodes_to_canonical_form() -> None:
    ulid_value = generate_ulid_str()

    assert ulid_bytes_to_str(ulid_str_to_bytes(ulid_value.lower())) == ulid_value


@pytest.mark.parametrize("value", ["", "wf1", "8" + "Z" * 25, "I" * 26, 42, None])
def test_invalid_ulid_values_are_rejected(value: object) -> None:
    assert is_ulid_str(value) is False
