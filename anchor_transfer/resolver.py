"""
Issuer → transfer server URL resolution.

Walks issuer account → home domain → domain configuration document →
declared transfer server URL. Each step that finds nothing yields None
("this issuer has no anchor"); failures to read the ledger or the
domain configuration propagate ("could not determine").

No retries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from anchor_transfer.domain_config import DomainConfig, DomainConfigResolver
from anchor_transfer.ledger import AccountLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedServer:
    """A transfer server URL and the home domain that declared it."""

    url: str
    domain: str


def get_transfer_server_url(config: DomainConfig) -> str | None:
    return config.transfer_server_url


async def resolve_issuer(
    issuer: str,
    *,
    ledger: AccountLedger,
    config_resolver: DomainConfigResolver,
) -> ResolvedServer | None:
    """Resolve an issuer account to its transfer server and home domain."""
    domain = await ledger.load_home_domain(issuer)
    if not domain:
        logger.debug(
            "Transfer server cannot be resolved. Issuing account has no home_domain: %s",
            issuer,
        )
        return None

    config = await config_resolver.resolve(domain)
    url = get_transfer_server_url(config)
    if not url:
        logger.debug("Domain %s declares no transfer server (issuer %s)", domain, issuer)
        return None

    return ResolvedServer(url=url, domain=domain)


async def fetch_transfer_server_url(
    issuer: str,
    *,
    ledger: AccountLedger,
    config_resolver: DomainConfigResolver,
) -> str | None:
    """Resolve an issuer account to its transfer server URL, or None."""
    resolved = await resolve_issuer(issuer, ledger=ledger, config_resolver=config_resolver)
    return resolved.url if resolved is not None else None
