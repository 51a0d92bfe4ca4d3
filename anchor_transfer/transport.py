"""
Transport protocol for anchor and ledger HTTP calls.

Defines the seam where concrete HTTP implementations plug in. Everything
above this module (ledger, domain config, transfer server requests)
depends on ``HttpTransport``, not on httpx directly, so tests can pass a
fake transport that returns canned responses.

Concrete implementations:
    - HttpxTransport (default, uses httpx.AsyncClient)
    - FakeTransport (tests)

Status codes are never raised as errors here: callers classify them.
Only failures of the exchange itself (timeout, connection refused, TLS,
protocol errors) raise ``TransportError``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from anchor_transfer.errors import TransportError


@dataclass(frozen=True)
class TransportResponse:
    """A received HTTP response.

    Attributes:
        status_code: HTTP status code.
        text: Raw response body as text.
        url: The URL that was requested (including query string).
    """

    status_code: int
    text: str = ""
    url: str = ""

    def json(self) -> Any:
        """Decoded JSON body, or None when the body is empty or not JSON."""
        if not self.text:
            return None
        try:
            return json.loads(self.text)
        except json.JSONDecodeError:
            return None


@runtime_checkable
class HttpTransport(Protocol):
    """Async transport for plain HTTP requests."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Send a request and return the response, whatever its status.

        Args:
            method: HTTP method ("GET", "POST").
            url: Absolute request URL.
            params: Query string parameters.
            data: Form-encoded request body.
            headers: Extra request headers.

        Raises:
            TransportError: When no response was received.
        """
        ...


class HttpxTransport:
    """Default transport using httpx.AsyncClient.

    Args:
        timeout: Request timeout in seconds.
        headers: Headers sent with every request.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._timeout = timeout
        self._headers = dict(headers or {})

    @property
    def timeout(self) -> float:
        return self._timeout

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Send the request via httpx."""
        merged_headers = {"Accept": "application/json", **self._headers, **(headers or {})}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=dict(params) if params else None,
                    data=dict(data) if data else None,
                    headers=merged_headers,
                )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"HTTP request timed out after {self._timeout}s",
                error_code="TIMEOUT",
                details={"url": url, "timeout_s": self._timeout},
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"Failed to connect to {url}",
                error_code="CONNECTION_FAILED",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}",
                error_code="HTTP_ERROR",
                details={"url": url, "error": str(e)},
            ) from e

        return TransportResponse(
            status_code=response.status_code,
            text=response.text,
            url=str(response.request.url),
        )


def bearer_headers(auth_token: str | None) -> dict[str, str]:
    """Authorization header for a token, or no headers at all."""
    if not auth_token:
        return {}
    return {"Authorization": f"Bearer {auth_token}"}


def join_url(base_url: str, path: str) -> str:
    """Join a base URL and a relative path with exactly one slash."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
