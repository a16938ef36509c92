"""Factory helpers for creating consistent shared errors."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail


def validation_error(
    message: str,
    *,
    code: str = codes.VALIDATION_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a validation-category error."""
    return _error(message, code=code, category=ErrorCategory.VALIDATION, metadata=metadata)


def not_found_error(
    message: str,
    *,
    code: str = codes.NOT_FOUND,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a not-found-category error."""
    return _error(message, code=code, category=ErrorCategory.NOT_FOUND, metadata=metadata)


def conflict_error(
    message: str,
    *,
    code: str = codes.CONFLICT,
    retryable: bool = False,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a conflict-category error.

    Conflicts caused by concurrent writers are safe for the caller to retry and
    should be created with ``retryable=True``.
    """
    return _error(
        message,
        code=code,
        category=ErrorCategory.CONFLICT,
        retryable=retryable,
        metadata=metadata,
    )



def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create a dependency-category error."""
    return _error(
        message,
        code=code,
        category=ErrorCategory.DEPENDENCY,
        retryable=retryable,
        metadata=metadata,
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Create an internal-category error."""
    return _error(message, code=code, category=ErrorCategory.INTERNAL, metadata=metadata)


def _error(
    message: str,
    *,
    code: str,
    category: ErrorCategory,
    retryable: bool = False,
    metadata: Mapping[str, str] | None,
) -> ErrorDetail:
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=retryable,
        metadata=_meta(metadata),
    )


def _meta(metadata: Mapping[str, str] | None) -> dict[str, str]:
    """Normalize optional metadata into a mutable plain dict."""
    if metadata is None:
        return {}
    return dict(metadata)
