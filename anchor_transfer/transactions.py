"""
Transfer transaction status (``/transaction`` and ``/transactions``).

Status polling is pass-through: the anchor's transaction records are
returned as dicts. ``TransferStatus`` names the statuses anchors report.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from anchor_transfer.errors import AnchorResponseError
from anchor_transfer.results import TransferKind
from anchor_transfer.server import TransferServer, get, response_error
from anchor_transfer.transport import HttpTransport, HttpxTransport, TransportResponse


class TransferStatus(StrEnum):
    """Transaction statuses reported by anchors."""

    COMPLETED = "completed"
    PENDING_EXTERNAL = "pending_external"
    PENDING_ANCHOR = "pending_anchor"
    PENDING_STELLAR = "pending_stellar"
    PENDING_TRUST = "pending_trust"
    PENDING_USER = "pending_user"
    PENDING_USER_TRANSFER_START = "pending_user_transfer_start"
    INCOMPLETE = "incomplete"
    NO_MARKET = "no_market"
    TOO_SMALL = "too_small"
    TOO_LARGE = "too_large"
    ERROR = "error"


def _payload(server: TransferServer, response: TransportResponse, key: str) -> Any:
    if response.status_code != 200:
        raise response_error(server, response)
    body = response.json()
    if not isinstance(body, dict) or key not in body:
        raise AnchorResponseError(
            f"{server.domain} response has no {key!r} field",
            domain=server.domain,
            status_code=response.status_code,
            url=response.url or None,
        )
    return body[key]


async def fetch_transaction(
    server: TransferServer,
    transaction_id: str,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> dict[str, Any]:
    """Fetch one transaction record by the anchor's transaction id."""
    transport = transport or HttpxTransport()
    response = await get(
        server,
        "/transaction",
        transport=transport,
        params={"id": transaction_id},
        auth_token=auth_token,
    )
    transaction = _payload(server, response, "transaction")
    if not isinstance(transaction, dict):
        raise AnchorResponseError(
            f"{server.domain} returned a malformed transaction record",
            domain=server.domain,
            status_code=response.status_code,
            url=response.url or None,
        )
    return transaction


async def fetch_transactions(
    server: TransferServer,
    asset_code: str,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
    kind: TransferKind | None = None,
    limit: int | None = None,
    no_older_than: str | None = None,
) -> list[dict[str, Any]]:
    """Fetch the authenticated account's transactions for an asset.

    Args:
        server: Anchor transfer server.
        asset_code: Asset code to list transactions for.
        transport: Injectable transport. Defaults to HttpxTransport.
        auth_token: Bearer token identifying the account.
        kind: Only deposits or only withdrawals.
        limit: Maximum number of records.
        no_older_than: ISO 8601 lower bound on ``started_at``.
    """
    transport = transport or HttpxTransport()
    params: dict[str, str] = {"asset_code": asset_code}
    if kind is not None:
        params["kind"] = str(kind)
    if limit is not None:
        params["limit"] = str(limit)
    if no_older_than is not None:
        params["no_older_than"] = no_older_than

    response = await get(
        server,
        "/transactions",
        transport=transport,
        params=params,
        auth_token=auth_token,
    )
    transactions = _payload(server, response, "transactions")
    if not isinstance(transactions, list):
        raise AnchorResponseError(
            f"{server.domain} returned a malformed transaction list",
            domain=server.domain,
            status_code=response.status_code,
            url=response.url or None,
        )
    return [tx for tx in transactions if isinstance(tx, dict)]
