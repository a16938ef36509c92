"""Postgres/SQLAlchemy exception normalization helpers."""

from __future__ import annotations

from psycopg import errors as psycopg_errors
from sqlalchemy import exc as sa_exc

from packages.guard_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    internal_error,
)

_DRIVER_MODULE_PREFIXES = ("sqlalchemy", "psycopg")


def is_postgres_error(exc: Exception) -> bool:
    """Return ``True`` when ``exc`` originates from SQLAlchemy or psycopg."""
    return type(exc).__module__.startswith(_DRIVER_MODULE_PREFIXES)


def is_unique_violation(exc: Exception) -> bool:
    """Return ``True`` when ``exc`` is (or wraps) a unique-constraint violation."""
    if isinstance(exc, psycopg_errors.UniqueViolation):
        return True
    if isinstance(exc, sa_exc.IntegrityError):
        return isinstance(exc.orig, psycopg_errors.UniqueViolation)
    return False


def normalize_postgres_error(exc: Exception) -> ErrorDetail:
    """Map low-level DB exceptions into shared structured error semantics."""
    metadata = {"exception_type": type(exc).__name__}

    if is_unique_violation(exc):
        return conflict_error(
            "resource already exists",
            code=codes.ALREADY_EXISTS,
            metadata=metadata,
        )

    if isinstance(
        exc,
        (
            sa_exc.OperationalError,
            sa_exc.TimeoutError,
            sa_exc.DisconnectionError,
            psycopg_errors.OperationalError,
        ),
    ):
        return dependency_error(
            "postgres unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            retryable=True,
            metadata=metadata,
        )

    if isinstance(exc, (sa_exc.InterfaceError, sa_exc.ProgrammingError, sa_exc.DBAPIError)):
        return dependency_error(
            "postgres request failed",
            code=codes.DEPENDENCY_FAILURE,
            retryable=False,
            metadata=metadata,
        )

    return internal_error(
        "unexpected postgres failure",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
