"""
Batch discovery: assets → transfer servers → per-asset capability info.

Two steps, each deduplicating its network work:

    fetch_transfer_servers()
        One resolution per distinct issuer, one TransferServer per
        distinct URL. Returns asset → TransferServer | None.

    fetch_asset_transfer_infos()
        One info fetch per distinct server URL, redistributed to every
        asset that shares the server. Returns asset → AssetTransferInfo.

Partial-failure policy (both steps):
    Failing items are tolerated and mapped to None / the empty record,
    unless every item of the batch fails. A 100% failure rate points at
    a systemic problem (ledger or network unreachable), so the batch
    raises, chained to the first error in input order.

Tolerated failures are debug-logged and kept on the returned mapping's
``failures`` attribute.

Nothing is cached between calls: hold on to the returned mappings to
reuse them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from anchor_transfer.assets import Asset
from anchor_transfer.concurrency import dedupe, ordered_map
from anchor_transfer.config import TransferOptions
from anchor_transfer.domain_config import DomainConfigResolver
from anchor_transfer.errors import (
    AllFetchesFailedError,
    AllResolutionsFailedError,
    AssetNotIssuedError,
)
from anchor_transfer.info import AssetTransferInfo, TransferInfo, fetch_info
from anchor_transfer.ledger import AccountLedger
from anchor_transfer.resolver import ResolvedServer, resolve_issuer
from anchor_transfer.server import TransferServer
from anchor_transfer.transport import HttpTransport, HttpxTransport

logger = logging.getLogger(__name__)


class _AssetMapping(dict):
    """An asset-keyed dict that also reports tolerated per-item failures."""

    def __init__(
        self,
        items: Mapping[Asset, object] | None = None,
        *,
        failures: Mapping[str, BaseException] | None = None,
    ) -> None:
        super().__init__(items or {})
        self.failures: dict[str, BaseException] = dict(failures or {})


class TransferServerCache(_AssetMapping):
    """Asset → TransferServer | None. ``failures`` is keyed by issuer."""


class AssetTransferInfoMap(_AssetMapping):
    """Asset → AssetTransferInfo. ``failures`` is keyed by server URL."""


def _first_failure(keys: list[str], failures: Mapping[str, BaseException]) -> BaseException:
    for key in keys:
        if key in failures:
            return failures[key]
    raise LookupError("no failures recorded")


async def fetch_transfer_servers(
    assets: Iterable[Asset],
    *,
    ledger: AccountLedger,
    config_resolver: DomainConfigResolver,
    options: TransferOptions | None = None,
) -> TransferServerCache:
    """Resolve the transfer server of every asset's issuer.

    Args:
        assets: Issued assets. Order is preserved in the result.
        ledger: Reads issuer home domains.
        config_resolver: Reads domain configuration documents.
        options: Request defaults attached to every built server.

    Returns:
        TransferServerCache mapping each asset to its server or None.

    Raises:
        AssetNotIssuedError: If any asset is native (before any I/O).
        AllResolutionsFailedError: If every distinct issuer failed.
    """
    asset_list = list(assets)
    for asset in asset_list:
        if asset.is_native:
            raise AssetNotIssuedError(
                "Native asset does not have an issuer account.",
                details={"code": asset.code},
            )

    issuers = dedupe(asset.require_issuer() for asset in asset_list)
    failures: dict[str, BaseException] = {}

    async def _resolve(issuer: str) -> ResolvedServer | None:
        try:
            return await resolve_issuer(issuer, ledger=ledger, config_resolver=config_resolver)
        except Exception as e:
            failures[issuer] = e
            return None

    resolved = await ordered_map(issuers, _resolve)

    if failures and len(failures) == len(issuers):
        logger.debug("Transfer server URLs could not be fetched: %r", failures)
        first = _first_failure(issuers, failures)
        raise AllResolutionsFailedError(
            f"Transfer server resolution failed for all {len(issuers)} issuer(s): {first}",
            [failures[issuer] for issuer in issuers if issuer in failures],
            details={"issuers": issuers},
        ) from first
    if failures:
        logger.debug(
            "Ignoring %d failed transfer server resolution(s): %r", len(failures), failures
        )

    transfer_options = options or TransferOptions()
    servers_by_url: dict[str, TransferServer] = {}
    for endpoint in resolved.values():
        if endpoint.url not in servers_by_url:
            servers_by_url[endpoint.url] = TransferServer(
                url=endpoint.url,
                domain=endpoint.domain,
                options=transfer_options,
            )

    cache = TransferServerCache(failures=failures)
    for asset in asset_list:
        endpoint = resolved.get(asset.require_issuer())
        cache[asset] = servers_by_url[endpoint.url] if endpoint is not None else None
    return cache


async def fetch_asset_transfer_infos(
    transfer_servers: Mapping[Asset, TransferServer | None],
    *,
    transport: HttpTransport | None = None,
    auth_token: str | None = None,
) -> AssetTransferInfoMap:
    """Fetch capability info once per distinct server and spread it per asset.

    Args:
        transfer_servers: Output of fetch_transfer_servers().
        transport: Injectable transport. Defaults to HttpxTransport.
        auth_token: Optional bearer token for the info requests.

    Returns:
        AssetTransferInfoMap with an entry for every input asset. Assets
        without a server, with a failed fetch, or whose code the server
        does not list map to ``AssetTransferInfo.empty()``.

    Raises:
        AllFetchesFailedError: If every distinct server fetch failed.
    """
    transport = transport or HttpxTransport()

    # One fetch per distinct URL
    servers_by_url: dict[str, TransferServer] = {}
    for server in transfer_servers.values():
        if server is not None and server.url not in servers_by_url:
            servers_by_url[server.url] = server
    urls = list(servers_by_url)

    failures: dict[str, BaseException] = {}

    async def _fetch(url: str) -> TransferInfo | None:
        try:
            return await fetch_info(servers_by_url[url], transport=transport, auth_token=auth_token)
        except Exception as e:
            failures[url] = e
            return None

    infos_by_url = await ordered_map(urls, _fetch)

    if failures and len(failures) == len(urls):
        logger.debug("Transfer server information could not be fetched: %r", failures)
        first = _first_failure(urls, failures)
        raise AllFetchesFailedError(
            f"Transfer info fetch failed for all {len(urls)} server(s): {first}",
            [failures[url] for url in urls if url in failures],
            details={"urls": urls},
        ) from first
    if failures:
        logger.debug("Ignoring %d failed transfer info fetch(es): %r", len(failures), failures)

    result = AssetTransferInfoMap(failures=failures)
    for asset, server in transfer_servers.items():
        info = infos_by_url.get(server.url) if server is not None else None
        result[asset] = AssetTransferInfo.for_asset(info, asset)
    return result
