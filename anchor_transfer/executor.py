"""
Deposit / withdrawal request executor.

State machine (shared by deposits and withdrawals):

    POST {base}/transactions/{deposit|withdraw}/interactive  (form fields)
        200  → success (or interactive KYC if the body says so)
        403  → KYC, classified by body ``type``
        404  → fall back to the legacy endpoint
        else → AnchorResponseError

    GET {base}/{deposit|withdraw}  (same fields as query parameters)
        200, 201 → success (or interactive KYC if the body says so)
        403      → KYC, classified by body ``type``
        else     → AnchorResponseError

The 404 fallback is the only retry. Transport errors propagate.
"""

from __future__ import annotations

import logging
from typing import Any

from anchor_transfer.errors import AnchorResponseError
from anchor_transfer.kyc import classify_kyc, is_interactive_instructions
from anchor_transfer.results import TransferKind, TransferResult, TransferSuccess
from anchor_transfer.schemas import (
    DEPOSIT_SUCCESS_SCHEMA,
    WITHDRAWAL_SUCCESS_SCHEMA,
    is_valid,
)
from anchor_transfer.server import TransferServer, get, post, response_error
from anchor_transfer.transfers import DepositRequest, WithdrawalRequest
from anchor_transfer.transport import HttpTransport, HttpxTransport, TransportResponse

logger = logging.getLogger(__name__)

_SUCCESS_SCHEMAS: dict[TransferKind, dict[str, Any]] = {
    TransferKind.DEPOSIT: DEPOSIT_SUCCESS_SCHEMA,
    TransferKind.WITHDRAWAL: WITHDRAWAL_SUCCESS_SCHEMA,
}

_INTERACTIVE_SUCCESS = frozenset({200})
# Some legacy anchors answer 201 instead of 200.
_LEGACY_SUCCESS = frozenset({200, 201})


def interactive_path(kind: TransferKind) -> str:
    return f"/transactions/{kind.path_segment}/interactive"


def legacy_path(kind: TransferKind) -> str:
    return f"/{kind.path_segment}"


def classify_response(
    kind: TransferKind,
    server: TransferServer,
    response: TransportResponse,
    *,
    success_statuses: frozenset[int] = _INTERACTIVE_SUCCESS,
) -> TransferResult:
    """Classify one anchor response into a TransferResult.

    Raises:
        KYCFormatError: 403 (or interactive prompt) without valid KYC data.
        AnchorResponseError: Unexpected status or malformed success body.
    """
    if response.status_code in success_statuses:
        body = response.json()
        if is_interactive_instructions(body):
            return classify_kyc(body, domain=server.domain, kind=kind)
        if not isinstance(body, dict) or not is_valid(body, _SUCCESS_SCHEMAS[kind]):
            raise AnchorResponseError(
                f"{server.domain} returned malformed {kind} instructions",
                domain=server.domain,
                status_code=response.status_code,
                url=response.url or None,
            )
        return TransferSuccess(kind=kind, instructions=body, domain=server.domain)

    if response.status_code == 403:
        return classify_kyc(response.json(), domain=server.domain, kind=kind)

    raise response_error(server, response)


async def execute_transfer(
    kind: TransferKind,
    server: TransferServer,
    fields: dict[str, str],
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> TransferResult:
    """Run the interactive request, falling back to the legacy one on 404."""
    transport = transport or HttpxTransport()

    response = await post(
        server,
        interactive_path(kind),
        transport=transport,
        data=fields,
        auth_token=auth_token,
    )
    if response.status_code != 404:
        return classify_response(kind, server, response)

    logger.debug(
        "%s has no interactive %s endpoint, falling back to %s",
        server.domain,
        kind,
        legacy_path(kind),
    )
    response = await get(
        server,
        legacy_path(kind),
        transport=transport,
        params=fields,
        auth_token=auth_token,
    )
    return classify_response(kind, server, response, success_statuses=_LEGACY_SUCCESS)


async def request_deposit(
    deposit: DepositRequest,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> TransferResult:
    """Request deposit instructions from the anchor."""
    return await execute_transfer(
        TransferKind.DEPOSIT,
        deposit.server,
        deposit.fields(),
        transport=transport,
        auth_token=auth_token,
    )


async def request_withdrawal(
    withdrawal: WithdrawalRequest,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> TransferResult:
    """Request withdrawal instructions from the anchor."""
    return await execute_transfer(
        TransferKind.WITHDRAWAL,
        withdrawal.server,
        withdrawal.fields(),
        transport=transport,
        auth_token=auth_token,
    )
