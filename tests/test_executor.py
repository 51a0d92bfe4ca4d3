"""
Tests for deposit / withdrawal execution and response classification.

FakeTransport with canned responses keyed by (method, url) — no network.

Test plan:
- Interactive endpoint: 200 → TransferSuccess, form fields merged with
  protocol fields winning, bearer header only with a token
- 200 carrying an interactive prompt → KYCRequired(INTERACTIVE)
- 403 → KYCRequired for each subtype; bad KYC bodies → KYCFormatError
- 404 → exactly one legacy GET with the same fields, then the same
  classification (200 and 201 succeed)
- Other statuses → AnchorResponseError with the anchor's message
- Withdrawals use the withdraw paths and withdrawal success schema
"""

import json
from dataclasses import dataclass
from typing import Any, Mapping

import pytest

from anchor_transfer.assets import Asset
from anchor_transfer.config import TransferOptions
from anchor_transfer.errors import AnchorResponseError, KYCFormatError, TransportError
from anchor_transfer.executor import (
    classify_response,
    interactive_path,
    legacy_path,
    request_deposit,
    request_withdrawal,
)
from anchor_transfer.results import (
    KYCRequired,
    KYCSubtype,
    TransferKind,
    TransferResultType,
    TransferSuccess,
)
from anchor_transfer.server import TransferServer
from anchor_transfer.transfers import (
    DepositRequest,
    DepositType,
    WithdrawalRequest,
    WithdrawalType,
)
from anchor_transfer.transport import TransportResponse

BASE = "https://api.anchor.example/sep6"
DOMAIN = "anchor.example"
ACCOUNT = "GDUSERACCOUNTAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
ISSUER = "GAISSUERAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"

DEPOSIT_INTERACTIVE = f"{BASE}/transactions/deposit/interactive"
DEPOSIT_LEGACY = f"{BASE}/deposit"
WITHDRAW_INTERACTIVE = f"{BASE}/transactions/withdraw/interactive"
WITHDRAW_LEGACY = f"{BASE}/withdraw"

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


@dataclass
class Call:
    method: str
    url: str
    params: Mapping[str, str] | None
    data: Mapping[str, str] | None
    headers: Mapping[str, str] | None


class FakeTransport:
    """Returns canned responses keyed by (method, url); 404 otherwise."""

    def __init__(self, routes: dict[tuple[str, str], TransportResponse | Exception]) -> None:
        self._routes = routes
        self.calls: list[Call] = []

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        self.calls.append(Call(method, url, params, data, headers))
        outcome = self._routes.get((method, url))
        if outcome is None:
            return TransportResponse(status_code=404, text="", url=url)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def json_response(status_code: int, body: Any) -> TransportResponse:
    return TransportResponse(status_code=status_code, text=json.dumps(body))


def _server(**options: str) -> TransferServer:
    return TransferServer(url=BASE, domain=DOMAIN, options=TransferOptions(**options))


def _deposit(**options: Any) -> DepositRequest:
    return DepositRequest(
        server=_server(lang="en", wallet_name="Solar"),
        asset=Asset("EURT", ISSUER),
        account=ACCOUNT,
        type=DepositType.SEPA,
        options=options,
    )


DEPOSIT_INSTRUCTIONS = {
    "how": "Make a payment to IBAN DE00 1234 with reference 4711",
    "eta": 3600,
    "extra_info": {"message": "SEPA only"},
}

WITHDRAWAL_INSTRUCTIONS = {
    "account_id": "GCANCHORDISTRIBUTIONAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA",
    "memo_type": "text",
    "memo": "wd-4711",
    "eta": 600,
}

INTERACTIVE_KYC = {
    "type": "interactive_customer_info_needed",
    "url": "https://anchor.example/kyc?session=abc",
    "id": "82fhs729f63dh0v4",
}

NON_INTERACTIVE_KYC = {
    "type": "non_interactive_customer_info_needed",
    "fields": ["family_name", "given_name", "address", "tax_id"],
}

STATUS_KYC = {
    "type": "customer_info_status",
    "status": "denied",
    "more_info_url": "https://anchor.example/kyc/status",
}


# ---------------------------------------------------------------------------
# Interactive endpoint
# ---------------------------------------------------------------------------


class TestInteractiveEndpoint:
    @pytest.mark.asyncio
    async def test_success_returns_instructions(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, TransferSuccess)
        assert result.type == TransferResultType.SUCCESS
        assert result.kind == TransferKind.DEPOSIT
        assert result.instructions == DEPOSIT_INSTRUCTIONS
        assert result.domain == DOMAIN
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_sends_merged_form_fields(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        await request_deposit(
            _deposit(email_address="user@example.com", lang="de", memo=None),
            transport=transport,
        )

        call = transport.calls[0]
        assert call.method == "POST"
        assert call.params is None
        assert call.data == {
            "lang": "de",
            "wallet_name": "Solar",
            "email_address": "user@example.com",
            "type": "SEPA",
            "asset_code": "EURT",
            "account": ACCOUNT,
        }

    @pytest.mark.asyncio
    async def test_protocol_fields_cannot_be_overridden(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        await request_deposit(
            _deposit(asset_code="EVIL", account="GATTACKER", type="SWIFT"), transport=transport
        )

        data = transport.calls[0].data
        assert data is not None
        assert data["asset_code"] == "EURT"
        assert data["account"] == ACCOUNT
        assert data["type"] == "SEPA"

    @pytest.mark.asyncio
    async def test_bearer_header_with_token(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        await request_deposit(_deposit(), transport=transport, auth_token="jwt-abc")

        assert transport.calls[0].headers == {"Authorization": "Bearer jwt-abc"}

    @pytest.mark.asyncio
    async def test_no_auth_header_without_token(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        await request_deposit(_deposit(), transport=transport)

        assert transport.calls[0].headers == {}

    @pytest.mark.asyncio
    async def test_200_interactive_prompt_is_kyc(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, INTERACTIVE_KYC)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.subtype == KYCSubtype.INTERACTIVE
        assert result.url == INTERACTIVE_KYC["url"]

    @pytest.mark.asyncio
    async def test_malformed_success_body(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): TransportResponse(status_code=200, text="<html>")}
        )

        with pytest.raises(AnchorResponseError, match="malformed"):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_deposit_body_without_how_is_malformed(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(200, {"eta": 60})}
        )

        with pytest.raises(AnchorResponseError, match="malformed deposit instructions"):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_empty_object_is_malformed(self) -> None:
        transport = FakeTransport({("GET", DEPOSIT_LEGACY): json_response(200, {})})

        with pytest.raises(AnchorResponseError, match="malformed deposit instructions"):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_transport_error_propagates_without_fallback(self) -> None:
        error = TransportError("timed out", error_code="TIMEOUT")
        transport = FakeTransport({("POST", DEPOSIT_INTERACTIVE): error})

        with pytest.raises(TransportError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert excinfo.value is error
        assert len(transport.calls) == 1


# ---------------------------------------------------------------------------
# KYC (403)
# ---------------------------------------------------------------------------


class TestKYC:
    @pytest.mark.asyncio
    async def test_interactive(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(403, INTERACTIVE_KYC)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.type == TransferResultType.KYC
        assert result.subtype == KYCSubtype.INTERACTIVE
        assert result.data == INTERACTIVE_KYC
        assert result.fields == []
        assert result.status is None

    @pytest.mark.asyncio
    async def test_non_interactive(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(403, NON_INTERACTIVE_KYC)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.subtype == KYCSubtype.NON_INTERACTIVE
        assert result.fields == ["family_name", "given_name", "address", "tax_id"]
        assert result.url is None

    @pytest.mark.asyncio
    async def test_status(self) -> None:
        transport = FakeTransport({("POST", DEPOSIT_INTERACTIVE): json_response(403, STATUS_KYC)})

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.subtype == KYCSubtype.STATUS
        assert result.status == "denied"

    @pytest.mark.asyncio
    async def test_unknown_type_names_domain(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(403, {"type": "something_else"})}
        )

        with pytest.raises(KYCFormatError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert str(excinfo.value) == (
            "anchor.example requires KYC, but did not specify valid KYC instructions."
        )
        assert excinfo.value.domain == DOMAIN

    @pytest.mark.asyncio
    async def test_empty_body(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): TransportResponse(status_code=403, text="")}
        )

        with pytest.raises(KYCFormatError, match="anchor.example"):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_known_type_with_invalid_payload(self) -> None:
        body = {"type": "customer_info_status", "status": "approved"}
        transport = FakeTransport({("POST", DEPOSIT_INTERACTIVE): json_response(403, body)})

        with pytest.raises(KYCFormatError):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_interactive_without_url(self) -> None:
        body = {"type": "interactive_customer_info_needed"}
        transport = FakeTransport({("POST", DEPOSIT_INTERACTIVE): json_response(403, body)})

        with pytest.raises(KYCFormatError):
            await request_deposit(_deposit(), transport=transport)


# ---------------------------------------------------------------------------
# Legacy fallback (404)
# ---------------------------------------------------------------------------


class TestLegacyFallback:
    @pytest.mark.asyncio
    async def test_falls_back_once_with_same_fields(self) -> None:
        transport = FakeTransport(
            {("GET", DEPOSIT_LEGACY): json_response(200, DEPOSIT_INSTRUCTIONS)}
        )

        result = await request_deposit(
            _deposit(email_address="user@example.com"), transport=transport, auth_token="t"
        )

        assert isinstance(result, TransferSuccess)
        assert [(c.method, c.url) for c in transport.calls] == [
            ("POST", DEPOSIT_INTERACTIVE),
            ("GET", DEPOSIT_LEGACY),
        ]
        post_call, get_call = transport.calls
        assert get_call.params == post_call.data
        assert get_call.data is None
        assert get_call.headers == {"Authorization": "Bearer t"}

    @pytest.mark.asyncio
    async def test_legacy_201_is_success(self) -> None:
        transport = FakeTransport(
            {("GET", DEPOSIT_LEGACY): json_response(201, DEPOSIT_INSTRUCTIONS)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, TransferSuccess)

    @pytest.mark.asyncio
    async def test_interactive_201_is_not_success(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(201, DEPOSIT_INSTRUCTIONS)}
        )

        with pytest.raises(AnchorResponseError):
            await request_deposit(_deposit(), transport=transport)

        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_legacy_403_is_kyc(self) -> None:
        transport = FakeTransport(
            {("GET", DEPOSIT_LEGACY): json_response(403, NON_INTERACTIVE_KYC)}
        )

        result = await request_deposit(_deposit(), transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.subtype == KYCSubtype.NON_INTERACTIVE

    @pytest.mark.asyncio
    async def test_legacy_404_is_an_error_not_another_retry(self) -> None:
        transport = FakeTransport({})

        with pytest.raises(AnchorResponseError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert excinfo.value.status_code == 404
        assert len(transport.calls) == 2

    @pytest.mark.asyncio
    async def test_legacy_500_uses_anchor_message(self) -> None:
        transport = FakeTransport(
            {("GET", DEPOSIT_LEGACY): json_response(500, {"error": "asset not supported"})}
        )

        with pytest.raises(AnchorResponseError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert str(excinfo.value) == "Request to anchor.example failed: asset not supported"


# ---------------------------------------------------------------------------
# Error statuses
# ---------------------------------------------------------------------------


class TestErrorStatuses:
    @pytest.mark.asyncio
    async def test_500_with_error_field(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(500, {"error": "maintenance"})}
        )

        with pytest.raises(AnchorResponseError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert str(excinfo.value) == "Request to anchor.example failed: maintenance"
        assert excinfo.value.status_code == 500
        assert excinfo.value.domain == DOMAIN
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_400_with_message_field(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): json_response(400, {"message": "bad account"})}
        )

        with pytest.raises(AnchorResponseError, match="bad account"):
            await request_deposit(_deposit(), transport=transport)

    @pytest.mark.asyncio
    async def test_status_without_body(self) -> None:
        transport = FakeTransport(
            {("POST", DEPOSIT_INTERACTIVE): TransportResponse(status_code=502, text="Bad Gateway")}
        )

        with pytest.raises(AnchorResponseError) as excinfo:
            await request_deposit(_deposit(), transport=transport)

        assert str(excinfo.value) == "Request to anchor.example failed with status 502"


# ---------------------------------------------------------------------------
# Withdrawals
# ---------------------------------------------------------------------------


class TestWithdrawal:
    @pytest.mark.asyncio
    async def test_success(self) -> None:
        transport = FakeTransport(
            {("POST", WITHDRAW_INTERACTIVE): json_response(200, WITHDRAWAL_INSTRUCTIONS)}
        )
        withdrawal = WithdrawalRequest(
            server=_server(),
            asset=Asset("EURT", ISSUER),
            type=WithdrawalType.BANK_ACCOUNT,
            options={"type": "crypto", "dest": "DE00 1234", "asset_code": "EVIL"},
        )

        result = await request_withdrawal(withdrawal, transport=transport)

        assert isinstance(result, TransferSuccess)
        assert result.kind == TransferKind.WITHDRAWAL
        assert result.instructions["account_id"] == WITHDRAWAL_INSTRUCTIONS["account_id"]
        assert transport.calls[0].data == {
            "type": "bank_account",
            "dest": "DE00 1234",
            "asset_code": "EURT",
        }

    @pytest.mark.asyncio
    async def test_falls_back_to_legacy_withdraw(self) -> None:
        transport = FakeTransport(
            {("GET", WITHDRAW_LEGACY): json_response(200, WITHDRAWAL_INSTRUCTIONS)}
        )
        withdrawal = WithdrawalRequest(server=_server(), asset=Asset("EURT", ISSUER), type="cash")

        result = await request_withdrawal(withdrawal, transport=transport)

        assert isinstance(result, TransferSuccess)
        assert [c.url for c in transport.calls] == [WITHDRAW_INTERACTIVE, WITHDRAW_LEGACY]

    @pytest.mark.asyncio
    async def test_kyc_carries_withdrawal_kind(self) -> None:
        transport = FakeTransport({("POST", WITHDRAW_INTERACTIVE): json_response(403, STATUS_KYC)})
        withdrawal = WithdrawalRequest(server=_server(), asset=Asset("EURT", ISSUER), type="cash")

        result = await request_withdrawal(withdrawal, transport=transport)

        assert isinstance(result, KYCRequired)
        assert result.kind == TransferKind.WITHDRAWAL

    @pytest.mark.asyncio
    async def test_malformed_withdrawal_body(self) -> None:
        body = {"account_id": 42}
        transport = FakeTransport({("POST", WITHDRAW_INTERACTIVE): json_response(200, body)})
        withdrawal = WithdrawalRequest(server=_server(), asset=Asset("EURT", ISSUER), type="cash")

        with pytest.raises(AnchorResponseError, match="malformed withdrawal instructions"):
            await request_withdrawal(withdrawal, transport=transport)

    @pytest.mark.asyncio
    async def test_withdrawal_body_without_account_id_is_malformed(self) -> None:
        body = {"memo_type": "text", "memo": "wd-4711"}
        transport = FakeTransport({("POST", WITHDRAW_INTERACTIVE): json_response(200, body)})
        withdrawal = WithdrawalRequest(server=_server(), asset=Asset("EURT", ISSUER), type="cash")

        with pytest.raises(AnchorResponseError, match="malformed withdrawal instructions"):
            await request_withdrawal(withdrawal, transport=transport)


# ---------------------------------------------------------------------------
# Paths and direct classification
# ---------------------------------------------------------------------------


class TestPaths:
    def test_paths(self) -> None:
        assert interactive_path(TransferKind.DEPOSIT) == "/transactions/deposit/interactive"
        assert interactive_path(TransferKind.WITHDRAWAL) == "/transactions/withdraw/interactive"
        assert legacy_path(TransferKind.DEPOSIT) == "/deposit"
        assert legacy_path(TransferKind.WITHDRAWAL) == "/withdraw"

    def test_classify_response_direct(self) -> None:
        result = classify_response(
            TransferKind.DEPOSIT, _server(), json_response(403, NON_INTERACTIVE_KYC)
        )

        assert isinstance(result, KYCRequired)
        assert result.domain == DOMAIN


class TestRequestValues:
    def test_deposit_requires_account(self) -> None:
        with pytest.raises(ValueError):
            DepositRequest(
                server=_server(), asset=Asset("EURT", ISSUER), account="", type=DepositType.SEPA
            )

    def test_options_are_read_only(self) -> None:
        options = {"memo": "1"}
        deposit = DepositRequest(
            server=_server(),
            asset=Asset("EURT", ISSUER),
            account=ACCOUNT,
            type=DepositType.SEPA,
            options=options,
        )
        options["memo"] = "2"

        assert deposit.options["memo"] == "1"
        with pytest.raises(TypeError):
            deposit.options["memo"] = "3"  # type: ignore[index]

    def test_values_are_stringified(self) -> None:
        deposit = DepositRequest(
            server=_server(),
            asset=Asset("EURT", ISSUER),
            account=ACCOUNT,
            type=DepositType.SWIFT,
            options={"amount": 25, "claimable_balance_supported": True},
        )

        fields = deposit.fields()

        assert fields["amount"] == "25"
        assert fields["claimable_balance_supported"] == "True"

    def test_method_type_is_required(self) -> None:
        with pytest.raises(ValueError):
            WithdrawalRequest(server=_server(), asset=Asset("EURT", ISSUER), type="")

    def test_options_cannot_override_method_type(self) -> None:
        withdrawal = WithdrawalRequest(
            server=_server(),
            asset=Asset("EURT", ISSUER),
            type=WithdrawalType.CRYPTO,
            options={"type": "cash", "dest": "bc1qexample"},
        )

        assert withdrawal.fields() == {
            "asset_code": "EURT",
            "type": "crypto",
            "dest": "bc1qexample",
        }
