"""Public shared HTTP client API for WorkflowGuard adapters."""

from .client import HttpClient
from .errors import (
    HttpClientError,
    HttpError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
)
from .status import http_status_for_errors

__all__ = [
    "HttpClient",
    "HttpClientError",
    "HttpError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "HttpStatusError",
    "http_status_for_errors",
]
