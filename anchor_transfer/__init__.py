"""
anchor_transfer — client for anchor transfer servers (SEP-6 / SEP-24).

Public API:

    Discovery (network I/O, deduplicated):
        - ``fetch_transfer_servers()`` — assets → TransferServer | None.
        - ``fetch_asset_transfer_infos()`` — servers → per-asset info.
        - ``fetch_transfer_server_url()`` — one issuer → URL | None.
        - ``open_transfer_server()`` — one domain → TransferServer.

    Capability info:
        - ``fetch_info()``, ``fetch_transfer_infos()``.
        - ``TransferInfo``, ``AssetTransferInfo`` and capability records.

    Requests:
        - ``DepositRequest``, ``WithdrawalRequest``.
        - ``request_deposit()``, ``request_withdrawal()`` — interactive
          request with legacy fallback, classified into a TransferResult.

    Results:
        - ``TransferSuccess``, ``KYCRequired`` (``KYCSubtype``).
        - ``plan_payment()`` — unsigned payment from success instructions.

    Status:
        - ``fetch_transaction()``, ``fetch_transactions()``, ``TransferStatus``.

    Protocols (for dependency injection):
        - ``HttpTransport`` — raw HTTP (default ``HttpxTransport``).
        - ``AccountLedger`` — issuer home domains (default ``HorizonLedger``).
        - ``DomainConfigResolver`` — stellar.toml (default ``StellarTomlResolver``).

    Utilities:
        - ``ordered_map()`` — concurrent map preserving input order.
"""

from anchor_transfer.assets import Asset
from anchor_transfer.concurrency import ordered_map
from anchor_transfer.config import ClientSettings, TransferOptions
from anchor_transfer.discovery import (
    AssetTransferInfoMap,
    TransferServerCache,
    fetch_asset_transfer_infos,
    fetch_transfer_servers,
)
from anchor_transfer.domain_config import (
    DomainConfig,
    DomainConfigResolver,
    StellarTomlResolver,
    parse_domain_config,
)
from anchor_transfer.errors import (
    AllFetchesFailedError,
    AllResolutionsFailedError,
    AnchorResponseError,
    AnchorTransferError,
    AssetNotIssuedError,
    ConfigurationError,
    DomainConfigError,
    KYCFormatError,
    LedgerError,
    MemoFormatError,
    ServerDiscoveryError,
    TransportError,
)
from anchor_transfer.executor import request_deposit, request_withdrawal
from anchor_transfer.info import (
    AssetTransferInfo,
    DepositCapability,
    TransferField,
    TransferInfo,
    TransferInfos,
    WithdrawCapability,
    fetch_info,
    fetch_transfer_infos,
)
from anchor_transfer.kyc import classify_kyc
from anchor_transfer.ledger import AccountLedger, HorizonLedger
from anchor_transfer.payment import Memo, MemoType, decode_memo, plan_payment
from anchor_transfer.resolver import fetch_transfer_server_url, get_transfer_server_url
from anchor_transfer.results import (
    KYCRequired,
    KYCSubtype,
    TransferKind,
    TransferResult,
    TransferResultType,
    TransferSuccess,
)
from anchor_transfer.server import TransferServer, open_transfer_server
from anchor_transfer.transactions import (
    TransferStatus,
    fetch_transaction,
    fetch_transactions,
)
from anchor_transfer.transfers import (
    DepositRequest,
    DepositType,
    WithdrawalRequest,
    WithdrawalType,
)
from anchor_transfer.transport import HttpTransport, HttpxTransport, TransportResponse

__all__ = [
    "AccountLedger",
    "AllFetchesFailedError",
    "AllResolutionsFailedError",
    "AnchorResponseError",
    "AnchorTransferError",
    "Asset",
    "AssetNotIssuedError",
    "AssetTransferInfo",
    "AssetTransferInfoMap",
    "ClientSettings",
    "ConfigurationError",
    "DepositCapability",
    "DepositRequest",
    "DepositType",
    "DomainConfig",
    "DomainConfigError",
    "DomainConfigResolver",
    "HorizonLedger",
    "HttpTransport",
    "HttpxTransport",
    "KYCFormatError",
    "KYCRequired",
    "KYCSubtype",
    "LedgerError",
    "Memo",
    "MemoFormatError",
    "MemoType",
    "ServerDiscoveryError",
    "StellarTomlResolver",
    "TransferField",
    "TransferInfo",
    "TransferInfos",
    "TransferKind",
    "TransferOptions",
    "TransferResult",
    "TransferResultType",
    "TransferServer",
    "TransferServerCache",
    "TransferStatus",
    "TransferSuccess",
    "TransportError",
    "TransportResponse",
    "WithdrawCapability",
    "WithdrawalRequest",
    "WithdrawalType",
    "classify_kyc",
    "decode_memo",
    "fetch_asset_transfer_infos",
    "fetch_info",
    "fetch_transaction",
    "fetch_transactions",
    "fetch_transfer_infos",
    "fetch_transfer_server_url",
    "fetch_transfer_servers",
    "get_transfer_server_url",
    "open_transfer_server",
    "ordered_map",
    "parse_domain_config",
    "plan_payment",
    "request_deposit",
    "request_withdrawal",
]
