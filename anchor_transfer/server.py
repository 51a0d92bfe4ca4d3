"""
Transfer server handle and requests against it.

``TransferServer`` is a plain value: base URL, owning domain, request
defaults and (when opened by domain) the currencies that domain
declares. Requests are free functions taking the server explicitly, plus
the transport and optional bearer token.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from anchor_transfer.assets import Asset
from anchor_transfer.config import TransferOptions
from anchor_transfer.domain_config import DomainConfigResolver
from anchor_transfer.errors import AnchorResponseError, ServerDiscoveryError
from anchor_transfer.transport import (
    HttpTransport,
    TransportResponse,
    bearer_headers,
    join_url,
)


@dataclass(frozen=True)
class TransferServer:
    """A resolved anchor endpoint.

    Attributes:
        url: Base URL of the transfer server.
        domain: Domain that declared this server (used in error messages).
        options: Defaults merged into every request.
        assets: Currencies declared by the domain, if known.
    """

    url: str
    domain: str
    options: TransferOptions = field(default_factory=TransferOptions)
    assets: tuple[Asset, ...] = ()

    def endpoint(self, path: str) -> str:
        return join_url(self.url, path)


async def get(
    server: TransferServer,
    path: str,
    *,
    transport: HttpTransport,
    params: Mapping[str, str] | None = None,
    auth_token: str | None = None,
) -> TransportResponse:
    return await transport.request(
        "GET",
        server.endpoint(path),
        params=params,
        headers=bearer_headers(auth_token),
    )


async def post(
    server: TransferServer,
    path: str,
    *,
    transport: HttpTransport,
    data: Mapping[str, str] | None = None,
    auth_token: str | None = None,
) -> TransportResponse:
    """POST form-encoded ``data`` to a path below the server's base URL."""
    return await transport.request(
        "POST",
        server.endpoint(path),
        data=data,
        headers=bearer_headers(auth_token),
    )


def response_error(server: TransferServer, response: TransportResponse) -> AnchorResponseError:
    """Build the error for an anchor response we cannot use.

    Prefers the anchor's own ``error`` / ``message`` field when the body
    is a JSON object carrying one.
    """
    body = response.json()
    message = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")

    if message:
        text = f"Request to {server.domain} failed: {message}"
    else:
        text = f"Request to {server.domain} failed with status {response.status_code}"
    return AnchorResponseError(
        text,
        domain=server.domain,
        status_code=response.status_code,
        url=response.url or None,
    )


async def open_transfer_server(
    domain: str,
    *,
    config_resolver: DomainConfigResolver,
    options: TransferOptions | None = None,
) -> TransferServer:
    """Open the transfer server a domain declares.

    Raises:
        ServerDiscoveryError: If the domain declares no transfer server.
    """
    config = await config_resolver.resolve(domain)
    url = config.transfer_server_url
    if not url:
        raise ServerDiscoveryError(
            f"{domain} does not declare a transfer server",
            details={"domain": domain},
        )
    return TransferServer(
        url=url,
        domain=domain,
        options=options or TransferOptions(),
        assets=config.currencies,
    )
