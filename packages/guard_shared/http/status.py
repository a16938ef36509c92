"""Mapping from shared error categories to HTTP status codes."""

from __future__ import annotations

from typing import Iterable

from packages.guard_shared.errors import ErrorCategory, ErrorDetail

_STATUS_BY_CATEGORY: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.POLICY: 403,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.DEPENDENCY: 503,
    ErrorCategory.INTERNAL: 500,
    ErrorCategory.UNSPECIFIED: 500,
}


def http_status_for_errors(errors: Iterable[ErrorDetail]) -> int:
    """Return the HTTP status for an envelope's errors, 200 when there are none.

    The first error decides the status; services put the primary failure first.
    """
    for error in errors:
        return _STATUS_BY_CATEGORY.get(error.category, 500)
    return 200
