"""
Payment planning from transfer instructions.

Turns successful instructions (``account_id`` plus optional ``memo`` /
``memo_type``) into an unsigned payment operation dict. This is the
"payment recipe" only: no sequence numbers, no fees, no signing, no
network calls.

Memo encodings:
    hash  32 bytes; the anchor sends base64 (64 hex chars also accepted).
          Encoded as lowercase hex.
    id    unsigned 64-bit integer. Encoded as a decimal string.
    text  at most 28 bytes of UTF-8.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from anchor_transfer.assets import Asset
from anchor_transfer.errors import AnchorResponseError, MemoFormatError
from anchor_transfer.results import TransferSuccess

MAX_TEXT_MEMO_BYTES = 28
HASH_MEMO_BYTES = 32
MAX_ID_MEMO = 2**64 - 1

# Amounts carry at most 7 decimal places on the ledger.
AMOUNT_DECIMALS = 7

_HEX_HASH_RE = re.compile(r"[0-9a-fA-F]{64}")
_ID_RE = re.compile(r"[0-9]+")


class MemoType(StrEnum):
    HASH = "hash"
    ID = "id"
    TEXT = "text"


@dataclass(frozen=True)
class Memo:
    type: MemoType
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"type": str(self.type), "value": self.value}


def _hash_memo(value: str) -> Memo:
    if _HEX_HASH_RE.fullmatch(value):
        raw = bytes.fromhex(value)
    else:
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MemoFormatError(f"hash memo is not valid base64: {value!r}") from e
    if len(raw) != HASH_MEMO_BYTES:
        raise MemoFormatError(
            f"hash memo must be {HASH_MEMO_BYTES} bytes, got {len(raw)}"
        )
    return Memo(type=MemoType.HASH, value=raw.hex())


def _id_memo(value: str) -> Memo:
    if not _ID_RE.fullmatch(value):
        raise MemoFormatError(f"id memo is not an unsigned integer: {value!r}")
    memo_id = int(value)
    if memo_id > MAX_ID_MEMO:
        raise MemoFormatError(f"id memo out of range: {value!r}")
    return Memo(type=MemoType.ID, value=str(memo_id))


def _text_memo(value: str) -> Memo:
    if len(value.encode("utf-8")) > MAX_TEXT_MEMO_BYTES:
        raise MemoFormatError(
            f"text memo exceeds {MAX_TEXT_MEMO_BYTES} bytes: {value!r}"
        )
    return Memo(type=MemoType.TEXT, value=value)


_MEMO_DECODERS = {
    MemoType.HASH: _hash_memo,
    MemoType.ID: _id_memo,
    MemoType.TEXT: _text_memo,
}


def decode_memo(memo: Any, memo_type: Any) -> Memo | None:
    """Decode an anchor's ``(memo, memo_type)`` pair.

    Returns:
        Memo, or None when no memo value is present.

    Raises:
        MemoFormatError: If a memo value is present with a missing or
            unknown type, or the value does not fit its type.
    """
    if memo is None or memo == "":
        return None
    if isinstance(memo, bool) or not isinstance(memo, (str, int)):
        raise MemoFormatError(f"memo must be a string, got {type(memo).__name__}")
    try:
        decoder = _MEMO_DECODERS[MemoType(memo_type)]
    except ValueError as e:
        raise MemoFormatError(f"unsupported memo type: {memo_type!r}") from e
    return decoder(str(memo))


def _normalize_amount(amount: str | int | Decimal) -> str:
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"amount is not a number: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise ValueError(f"amount must be positive, got: {amount!r}")
    if value.as_tuple().exponent < -AMOUNT_DECIMALS:
        raise ValueError(
            f"amount has more than {AMOUNT_DECIMALS} decimal places: {amount!r}"
        )
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def plan_payment(
    result: TransferSuccess,
    asset: Asset,
    amount: str | int | Decimal,
    *,
    source: str | None = None,
) -> dict[str, object]:
    """Build the unsigned payment operation the instructions call for.

    Args:
        result: Successful transfer instructions with ``account_id``.
        asset: Asset to send.
        amount: Amount to send (positive, at most 7 decimals).
        source: Optional source account of the operation.

    Returns:
        Unsigned payment operation dict.

    Raises:
        AnchorResponseError: If the instructions carry no ``account_id``.
        MemoFormatError: If the instructions carry an unusable memo.
        ValueError: If amount is not a positive number.
    """
    instructions = result.instructions
    destination = instructions.get("account_id")
    if not isinstance(destination, str) or not destination:
        raise AnchorResponseError(
            f"{result.domain or 'anchor'} {result.kind} instructions carry no account_id",
            domain=result.domain,
        )

    memo = decode_memo(instructions.get("memo"), instructions.get("memo_type"))

    operation: dict[str, object] = {
        "type": "payment",
        "destination": destination,
        "asset": "native" if asset.is_native else {"code": asset.code, "issuer": asset.issuer},
        "amount": _normalize_amount(amount),
    }
    if memo is not None:
        operation["memo"] = memo.to_dict()
    if source is not None:
        operation["source"] = source
    return operation
