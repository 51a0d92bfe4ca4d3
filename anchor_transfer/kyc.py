"""
KYC response classification.

Maps the anchor's ``type`` discriminator to a KYCSubtype:

    interactive_customer_info_needed      → INTERACTIVE
    non_interactive_customer_info_needed  → NON_INTERACTIVE
    customer_info_status                  → STATUS (pending or denied)

Any other discriminator, or a body that does not match the schema of
its discriminator, is a protocol violation (KYCFormatError).
"""

from __future__ import annotations

from typing import Any

from anchor_transfer.errors import KYCFormatError
from anchor_transfer.results import KYCRequired, KYCSubtype, TransferKind
from anchor_transfer.schemas import (
    KYC_INTERACTIVE_SCHEMA,
    KYC_NON_INTERACTIVE_SCHEMA,
    KYC_STATUS_SCHEMA,
    is_valid,
)

INTERACTIVE_TYPE = "interactive_customer_info_needed"
NON_INTERACTIVE_TYPE = "non_interactive_customer_info_needed"
STATUS_TYPE = "customer_info_status"

_KYC_SUBTYPES: dict[str, KYCSubtype] = {
    INTERACTIVE_TYPE: KYCSubtype.INTERACTIVE,
    NON_INTERACTIVE_TYPE: KYCSubtype.NON_INTERACTIVE,
    STATUS_TYPE: KYCSubtype.STATUS,
}

_KYC_SCHEMAS: dict[KYCSubtype, dict[str, Any]] = {
    KYCSubtype.INTERACTIVE: KYC_INTERACTIVE_SCHEMA,
    KYCSubtype.NON_INTERACTIVE: KYC_NON_INTERACTIVE_SCHEMA,
    KYCSubtype.STATUS: KYC_STATUS_SCHEMA,
}


def is_interactive_instructions(body: Any) -> bool:
    """True if a body is an interactive-flow prompt, whatever its status."""
    return isinstance(body, dict) and body.get("type") == INTERACTIVE_TYPE


def classify_kyc(body: Any, *, domain: str, kind: TransferKind) -> KYCRequired:
    """Turn a KYC response body into a KYCRequired result.

    Args:
        body: Decoded JSON body of the anchor response.
        domain: Anchor domain, named in the error.
        kind: Deposit or withdrawal.

    Raises:
        KYCFormatError: If the body carries no valid KYC instructions.
    """
    if not isinstance(body, dict):
        raise KYCFormatError(domain)

    kyc_type = body.get("type")
    subtype = _KYC_SUBTYPES.get(kyc_type) if isinstance(kyc_type, str) else None
    if subtype is None:
        raise KYCFormatError(domain, kyc_type)

    if not is_valid(body, _KYC_SCHEMAS[subtype]):
        raise KYCFormatError(domain, kyc_type)

    return KYCRequired(kind=kind, subtype=subtype, data=body, domain=domain)
