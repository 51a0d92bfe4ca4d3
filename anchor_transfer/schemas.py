"""
JSON schemas for anchor response bodies.

These check the envelope we rely on (types of the fields we read), not
the anchor-declared ``fields`` descriptions, which stay free-form.
"""

from __future__ import annotations

from typing import Any

import jsonschema  # type: ignore[import-untyped]

_NUMBER_OR_STRING = {"type": ["number", "string"]}

_CAPABILITY = {
    "type": "object",
    "properties": {
        "enabled": {"type": "boolean"},
        "authentication_required": {"type": "boolean"},
        "fee_fixed": _NUMBER_OR_STRING,
        "fee_percent": _NUMBER_OR_STRING,
        "min_amount": _NUMBER_OR_STRING,
        "max_amount": _NUMBER_OR_STRING,
        "fields": {"type": "object"},
        "types": {"type": "object"},
    },
}

INFO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "deposit": {"type": "object", "additionalProperties": _CAPABILITY},
        "withdraw": {"type": "object", "additionalProperties": _CAPABILITY},
        "fee": {"type": "object"},
        "transaction": {"type": "object"},
        "transactions": {"type": "object"},
    },
}

DEPOSIT_SUCCESS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["how"],
    "properties": {
        "how": {"type": "string"},
        "eta": {"type": "number"},
        "extra_info": {"type": ["object", "null"]},
    },
}

WITHDRAWAL_SUCCESS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["account_id"],
    "properties": {
        "account_id": {"type": "string"},
        "memo_type": {"type": ["string", "null"]},
        "memo": {"type": ["string", "integer", "null"]},
        "eta": {"type": "number"},
    },
}

KYC_INTERACTIVE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "url"],
    "properties": {
        "type": {"const": "interactive_customer_info_needed"},
        "url": {"type": "string", "minLength": 1},
        "id": {"type": ["string", "integer"]},
    },
}

KYC_NON_INTERACTIVE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "fields"],
    "properties": {
        "type": {"const": "non_interactive_customer_info_needed"},
        "fields": {"type": "array", "items": {"type": "string"}},
    },
}

KYC_STATUS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["type", "status"],
    "properties": {
        "type": {"const": "customer_info_status"},
        "status": {"enum": ["pending", "denied"]},
        "more_info_url": {"type": "string"},
        "eta": {"type": "number"},
    },
}


def validate(instance: Any, schema: dict[str, Any]) -> None:
    jsonschema.validate(instance=instance, schema=schema)


def is_valid(instance: Any, schema: dict[str, Any]) -> bool:
    try:
        validate(instance, schema)
    except jsonschema.ValidationError:
        return False
    return True
