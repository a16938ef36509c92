"""Thin synchronous HTTP client wrapper over httpx."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpJsonDecodeError, HttpRequestError, HttpStatusError


def _response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except UnicodeDecodeError:
        return ""


def _status_error(response: httpx.Response) -> HttpStatusError:
    status_code = response.status_code
    return HttpStatusError(
        message=f"HTTP {status_code} for {response.request.method} {response.request.url}",
        method=response.request.method,
        url=str(response.request.url),
        retryable=status_code >= 500 or status_code == 429,
        status_code=status_code,
        response_body=_response_text(response),
        response_headers=dict(response.headers.items()),
    )


def _request_identity(
    exc: httpx.RequestError, *, url: str, method: str
) -> tuple[str, str]:
    """Return the failing request URL and method, falling back to call args."""
    try:
        request = exc.request
    except RuntimeError:
        return url, method.upper()
    return str(request.url), request.method


class HttpClient:
    """Synchronous wrapper over ``httpx.Client`` raising typed errors."""

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            transport=transport,
        )

    def close(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        raise_for_status: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one request and map transport/status failures to typed errors."""
        try:
            response = self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            request_url, request_method = _request_identity(exc, url=url, method=method)
            raise HttpRequestError(
                message=f"HTTP request failed for {request_method} {request_url}",
                method=request_method,
                url=request_url,
                retryable=True,
                cause=exc,
            ) from exc

        if raise_for_status and response.is_error:
            raise _status_error(response)
        return response

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one GET request."""
        return self.request("GET", url, **kwargs)

    def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Issue one request and decode JSON from a successful response."""
        response = self.request(method, url, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise HttpJsonDecodeError(
                message=f"Invalid JSON response for {response.request.method} {response.request.url}",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response_body=_response_text(response),
                cause=exc,
            ) from exc

    def get_json(self, url: str, **kwargs: Any) -> Any:
        """Issue one GET request and decode JSON."""
        return self.request_json("GET", url, **kwargs)
