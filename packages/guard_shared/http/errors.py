"""Typed errors raised by the shared HTTP client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error type for shared HTTP helper failures."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpClientError(HttpError):
    """Base error for outbound HTTP call failures."""

    method: str
    url: str
    retryable: bool = False


@dataclass(frozen=True)
class HttpRequestError(HttpClientError):
    """Transport-level failure (connect, timeout, protocol)."""

    cause: Exception | None = None


@dataclass(frozen=True)
class HttpStatusError(HttpClientError):
    """Non-success HTTP status code."""

    status_code: int = 0
    response_body: str = ""
    response_headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class HttpJsonDecodeError(HttpClientError):
    """Successful response whose body is not valid JSON."""

    status_code: int = 0
    response_body: str = ""
    cause: Exception | None = None
