"""
Capability info (``GET {base}/info``) — parsed model and fetchers.

The info document lists, per asset code, independent deposit and
withdrawal capability records. ``AssetTransferInfo`` is the per-asset
view the aggregator hands out; its empty form (all fields None) means
"looked up, found nothing".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from anchor_transfer.assets import Asset
from anchor_transfer.errors import AnchorResponseError
from anchor_transfer.schemas import INFO_SCHEMA, is_valid
from anchor_transfer.server import TransferServer, get, response_error
from anchor_transfer.transport import HttpTransport, HttpxTransport


@dataclass(frozen=True)
class TransferField:
    """Anchor description of one request field."""

    description: str = ""
    optional: bool = False
    choices: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TransferField:
        if not isinstance(data, dict):
            return cls()
        choices = data.get("choices")
        return cls(
            description=str(data.get("description") or ""),
            optional=bool(data.get("optional", False)),
            choices=tuple(str(c) for c in choices) if isinstance(choices, list) else None,
        )


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _fields(data: Any) -> dict[str, TransferField]:
    if not isinstance(data, dict):
        return {}
    return {name: TransferField.from_dict(spec) for name, spec in data.items()}


@dataclass(frozen=True)
class DepositCapability:
    enabled: bool = False
    authentication_required: bool = False
    fee_fixed: float | None = None
    fee_percent: float | None = None
    min_amount: float | None = None
    max_amount: float | None = None
    fields: dict[str, TransferField] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DepositCapability:
        return cls(
            enabled=bool(data.get("enabled", False)),
            authentication_required=bool(data.get("authentication_required", False)),
            fee_fixed=_number(data.get("fee_fixed")),
            fee_percent=_number(data.get("fee_percent")),
            min_amount=_number(data.get("min_amount")),
            max_amount=_number(data.get("max_amount")),
            fields=_fields(data.get("fields")),
        )


@dataclass(frozen=True)
class WithdrawCapability:
    """Withdrawal capability; ``types`` maps withdrawal method → fields."""

    enabled: bool = False
    authentication_required: bool = False
    fee_fixed: float | None = None
    fee_percent: float | None = None
    min_amount: float | None = None
    max_amount: float | None = None
    types: dict[str, dict[str, TransferField]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WithdrawCapability:
        raw_types = data.get("types")
        types: dict[str, dict[str, TransferField]] = {}
        if isinstance(raw_types, dict):
            for method, spec in raw_types.items():
                types[method] = _fields(spec.get("fields") if isinstance(spec, dict) else None)
        return cls(
            enabled=bool(data.get("enabled", False)),
            authentication_required=bool(data.get("authentication_required", False)),
            fee_fixed=_number(data.get("fee_fixed")),
            fee_percent=_number(data.get("fee_percent")),
            min_amount=_number(data.get("min_amount")),
            max_amount=_number(data.get("max_amount")),
            types=types,
        )


def _feature_enabled(data: dict[str, Any], name: str) -> bool:
    feature = data.get(name)
    return isinstance(feature, dict) and bool(feature.get("enabled", False))


@dataclass(frozen=True)
class TransferInfo:
    """A transfer server's capability document."""

    deposit: dict[str, DepositCapability] = field(default_factory=dict)
    withdraw: dict[str, WithdrawCapability] = field(default_factory=dict)
    fee_enabled: bool = False
    transaction_enabled: bool = False
    transactions_enabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransferInfo:
        return cls(
            deposit={
                code: DepositCapability.from_dict(entry)
                for code, entry in (data.get("deposit") or {}).items()
            },
            withdraw={
                code: WithdrawCapability.from_dict(entry)
                for code, entry in (data.get("withdraw") or {}).items()
            },
            fee_enabled=_feature_enabled(data, "fee"),
            transaction_enabled=_feature_enabled(data, "transaction"),
            transactions_enabled=_feature_enabled(data, "transactions"),
        )


@dataclass(frozen=True)
class AssetTransferInfo:
    """Capability info for one asset.

    All three fields are None for the "no info" record.
    """

    transfer_info: TransferInfo | None = None
    deposit: DepositCapability | None = None
    withdraw: WithdrawCapability | None = None

    @classmethod
    def empty(cls) -> AssetTransferInfo:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.transfer_info is None

    @classmethod
    def for_asset(cls, info: TransferInfo | None, asset: Asset) -> AssetTransferInfo:
        """Select an asset's records; empty if the code is in neither section."""
        if info is None:
            return cls.empty()
        deposit = info.deposit.get(asset.code)
        withdraw = info.withdraw.get(asset.code)
        if deposit is None and withdraw is None:
            return cls.empty()
        return cls(transfer_info=info, deposit=deposit, withdraw=withdraw)


async def fetch_info(
    server: TransferServer,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> TransferInfo:
    """Fetch and parse ``GET {base}/info``.

    Raises:
        AnchorResponseError: On a non-200 status or a malformed document.
    """
    transport = transport or HttpxTransport()
    response = await get(server, "/info", transport=transport, auth_token=auth_token)
    if response.status_code != 200:
        raise response_error(server, response)

    body = response.json()
    if not is_valid(body, INFO_SCHEMA):
        raise AnchorResponseError(
            f"{server.domain} returned a malformed info document",
            domain=server.domain,
            status_code=response.status_code,
            url=response.url or None,
        )
    return TransferInfo.from_dict(body)


@dataclass(frozen=True)
class TransferInfos:
    """A server's info plus its declared assets, split by enabled direction."""

    transfer_info: TransferInfo
    depositable_assets: tuple[Asset, ...]
    withdrawable_assets: tuple[Asset, ...]


async def fetch_transfer_infos(
    server: TransferServer,
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> TransferInfos:
    info = await fetch_info(server, transport=transport, auth_token=auth_token)

    depositable = []
    withdrawable = []
    for asset in server.assets:
        deposit = info.deposit.get(asset.code)
        if deposit is not None and deposit.enabled:
            depositable.append(asset)
        withdraw = info.withdraw.get(asset.code)
        if withdraw is not None and withdraw.enabled:
            withdrawable.append(asset)

    return TransferInfos(
        transfer_info=info,
        depositable_assets=tuple(depositable),
        withdrawable_assets=tuple(withdrawable),
    )
