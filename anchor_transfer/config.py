"""
Client configuration.

``TransferOptions`` holds the server-level defaults that are merged into
every deposit / withdrawal request. ``ClientSettings`` bundles them with
the ledger endpoint and transport timeout, and can be loaded from the
environment:

    ANCHOR_TRANSFER_HORIZON_URL   ledger API base URL
    ANCHOR_TRANSFER_TIMEOUT       HTTP timeout in seconds
    ANCHOR_TRANSFER_LANG          ISO 639-1 language code sent to anchors
    ANCHOR_TRANSFER_WALLET_NAME   wallet name shown by anchors
    ANCHOR_TRANSFER_WALLET_URL    wallet URL shown by anchors
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from anchor_transfer.errors import ConfigurationError

DEFAULT_HORIZON_URL = "https://horizon.stellar.org"
DEFAULT_TIMEOUT_S = 30.0

_ENV_PREFIX = "ANCHOR_TRANSFER_"


@dataclass(frozen=True)
class TransferOptions:
    """Server-level request defaults (lowest precedence when merging)."""

    lang: str | None = None
    wallet_name: str | None = None
    wallet_url: str | None = None

    def to_params(self) -> dict[str, str]:
        """Non-empty defaults as request fields."""
        params = {
            "lang": self.lang,
            "wallet_name": self.wallet_name,
            "wallet_url": self.wallet_url,
        }
        return {key: value for key, value in params.items() if value is not None}


@dataclass(frozen=True)
class ClientSettings:
    horizon_url: str = DEFAULT_HORIZON_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    transfer_options: TransferOptions = field(default_factory=TransferOptions)

    def validate(self) -> None:
        if not self.horizon_url:
            raise ConfigurationError("horizon_url must be non-empty")
        if not self.horizon_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"horizon_url must be an http(s) URL, got: {self.horizon_url!r}"
            )
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be greater than zero (got {self.timeout_s})"
            )
        lang = self.transfer_options.lang
        if lang is not None and not (len(lang) == 2 and lang.isalpha()):
            raise ConfigurationError(
                f"lang must be an ISO 639-1 code, got: {lang!r}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientSettings:
        """Build settings from ``ANCHOR_TRANSFER_*`` variables, then validate."""
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(_ENV_PREFIX + name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        timeout_raw = _get("TIMEOUT")
        try:
            timeout_s = float(timeout_raw) if timeout_raw is not None else DEFAULT_TIMEOUT_S
        except ValueError as exc:
            raise ConfigurationError(
                f"{_ENV_PREFIX}TIMEOUT must be a number, got: {timeout_raw!r}"
            ) from exc

        settings = cls(
            horizon_url=_get("HORIZON_URL") or DEFAULT_HORIZON_URL,
            timeout_s=timeout_s,
            transfer_options=TransferOptions(
                lang=_get("LANG"),
                wallet_name=_get("WALLET_NAME"),
                wallet_url=_get("WALLET_URL"),
            ),
        )
        settings.validate()
        return settings
