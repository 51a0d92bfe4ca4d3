"""
Deposit / withdrawal results.

A request ends in exactly one of:

    TransferSuccess  the anchor returned instructions
    KYCRequired      the anchor needs customer information first;
                     ``subtype`` says which kind of KYC response it sent

Consumers match on the class (or on ``result.type``), not on raw
anchor ``type`` strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Union


class TransferKind(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    @property
    def path_segment(self) -> str:
        """Endpoint name used in anchor URLs."""
        return "deposit" if self is TransferKind.DEPOSIT else "withdraw"


class TransferResultType(StrEnum):
    SUCCESS = "success"
    KYC = "kyc"


class KYCSubtype(StrEnum):
    """Kind of KYC response sent by the anchor."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "non-interactive"
    STATUS = "status"


@dataclass(frozen=True)
class TransferSuccess:
    """Instructions for completing the transfer.

    For deposits this is the anchor's ``how`` / ``extra_info`` payload;
    for withdrawals it carries ``account_id`` and the optional memo the
    payment to the anchor must use.
    """

    kind: TransferKind
    instructions: dict[str, Any] = field(default_factory=dict)
    domain: str = ""

    @property
    def type(self) -> TransferResultType:
        return TransferResultType.SUCCESS


@dataclass(frozen=True)
class KYCRequired:
    kind: TransferKind
    subtype: KYCSubtype
    data: dict[str, Any] = field(default_factory=dict)
    domain: str = ""

    @property
    def type(self) -> TransferResultType:
        return TransferResultType.KYC

    @property
    def url(self) -> str | None:
        """Interactive flow URL to show to the user."""
        if self.subtype is not KYCSubtype.INTERACTIVE:
            return None
        return self.data.get("url")

    @property
    def fields(self) -> list[str]:
        """Customer fields the anchor asks for (non-interactive)."""
        if self.subtype is not KYCSubtype.NON_INTERACTIVE:
            return []
        return list(self.data.get("fields") or [])

    @property
    def status(self) -> str | None:
        """Customer info status, "pending" or "denied"."""
        if self.subtype is not KYCSubtype.STATUS:
            return None
        return self.data.get("status")


TransferResult = Union[TransferSuccess, KYCRequired]
