"""
Error taxonomy for anchor discovery and transfer requests.

Every error carries a machine-readable ``error_code`` and a ``details``
dict alongside the human-readable message, so callers can branch on the
code without parsing strings.

Propagation:
    - Per-item failures inside a fan-out (one issuer, one info fetch)
      are tolerated and surface as ``None`` / empty records.
    - A fan-out where every item fails raises ``AllResolutionsFailedError``
      or ``AllFetchesFailedError``, chained to the first underlying error.
    - Request-level failures (deposit / withdrawal) always propagate.
"""

from __future__ import annotations

from typing import Any


class AnchorTransferError(Exception):
    """Base class for all anchor_transfer errors."""

    default_code = "ANCHOR_TRANSFER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}


class ConfigurationError(AnchorTransferError):
    default_code = "CONFIGURATION"


class TransportError(AnchorTransferError):
    """The HTTP exchange itself failed (timeout, connect, protocol)."""

    default_code = "HTTP_ERROR"


class LedgerError(AnchorTransferError):
    """The ledger API answered, but not with an account record."""

    default_code = "LEDGER_ERROR"


class DomainConfigError(AnchorTransferError):
    """A domain's configuration document could not be fetched or parsed."""

    default_code = "DOMAIN_CONFIG"


class AssetNotIssuedError(AnchorTransferError):
    """A native asset was passed where an issued asset is required."""

    default_code = "ASSET_NOT_ISSUED"


class ServerDiscoveryError(AnchorTransferError):
    """A domain does not declare a transfer server."""

    default_code = "NO_TRANSFER_SERVER"


class _BatchFailedError(AnchorTransferError):
    def __init__(
        self,
        message: str,
        errors: list[BaseException],
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.errors = errors

    @property
    def first_error(self) -> BaseException | None:
        return self.errors[0] if self.errors else None


class AllResolutionsFailedError(_BatchFailedError):
    """Every issuer in a batch failed transfer-server resolution."""

    default_code = "ALL_RESOLUTIONS_FAILED"


class AllFetchesFailedError(_BatchFailedError):
    """Every transfer server in a batch failed its info fetch."""

    default_code = "ALL_FETCHES_FAILED"


class AnchorResponseError(AnchorTransferError):
    """An anchor answered with an unexpected status or a malformed body."""

    default_code = "ANCHOR_RESPONSE"

    def __init__(
        self,
        message: str,
        *,
        domain: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(
            message,
            details={"domain": domain, "status_code": status_code, "url": url},
        )
        self.domain = domain
        self.status_code = status_code
        self.url = url


class KYCFormatError(AnchorTransferError):
    """An anchor requested KYC without valid KYC instructions."""

    default_code = "KYC_FORMAT"

    def __init__(self, domain: str, kyc_type: object = None) -> None:
        super().__init__(
            f"{domain} requires KYC, but did not specify valid KYC instructions.",
            details={"domain": domain, "type": kyc_type},
        )
        self.domain = domain


class MemoFormatError(AnchorTransferError):
    """Transfer instructions carry a memo that cannot be encoded."""

    default_code = "MEMO_FORMAT"
