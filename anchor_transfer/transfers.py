"""
Deposit and withdrawal request values.

A request is built from a TransferServer, an Asset and caller options.
``fields()`` produces the form / query fields sent to the anchor, merged
in increasing precedence:

    server defaults (lang, wallet_name, wallet_url)
    < caller options
    < protocol fields (asset_code, type; account for deposits)

Caller options never override protocol fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from anchor_transfer.assets import Asset
from anchor_transfer.results import TransferKind
from anchor_transfer.server import TransferServer


class DepositType(StrEnum):
    SEPA = "SEPA"
    SWIFT = "SWIFT"


class WithdrawalType(StrEnum):
    BANK_ACCOUNT = "bank_account"
    CASH = "cash"
    CRYPTO = "crypto"
    MOBILE = "mobile"
    BILL_PAYMENT = "bill_payment"


def _freeze(options: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(options or {}))


def _merge_fields(*layers: Mapping[str, Any]) -> dict[str, str]:
    merged: dict[str, Any] = {}
    for layer in layers:
        merged.update(layer)
    return {key: str(value) for key, value in merged.items() if value is not None}


@dataclass(frozen=True)
class DepositRequest:
    """A deposit of ``asset`` into ``account``.

    Attributes:
        server: Anchor transfer server.
        asset: Asset to deposit.
        account: Account that receives the deposited asset.
        type: Deposit method (``DepositType`` or an anchor-specific name).
        options: Extra fields (email_address, memo, memo_type, ...).
    """

    server: TransferServer
    asset: Asset
    account: str
    type: DepositType | str
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    kind = TransferKind.DEPOSIT

    def __post_init__(self) -> None:
        if not self.account:
            raise ValueError("account must be non-empty")
        if not self.type:
            raise ValueError("deposit type must be non-empty")
        object.__setattr__(self, "options", _freeze(self.options))

    def fields(self) -> dict[str, str]:
        return _merge_fields(
            self.server.options.to_params(),
            self.options,
            {"asset_code": self.asset.code, "account": self.account, "type": self.type},
        )


@dataclass(frozen=True)
class WithdrawalRequest:
    """A withdrawal of ``asset``.

    Attributes:
        server: Anchor transfer server.
        asset: Asset to withdraw.
        type: Withdrawal method (``WithdrawalType`` or an anchor-specific name).
        options: Extra fields (account, dest, dest_extra, memo, ...).
    """

    server: TransferServer
    asset: Asset
    type: WithdrawalType | str
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    kind = TransferKind.WITHDRAWAL

    def __post_init__(self) -> None:
        if not self.type:
            raise ValueError("withdrawal type must be non-empty")
        object.__setattr__(self, "options", _freeze(self.options))

    def fields(self) -> dict[str, str]:
        return _merge_fields(
            self.server.options.to_params(),
            self.options,
            {"asset_code": self.asset.code, "type": self.type},
        )
