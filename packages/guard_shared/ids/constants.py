"""Shared ULID and PostgreSQL-domain constants."""

ULID_DOMAIN_NAME = "ulid_bin"
ULID_STRING_LENGTH = 26
