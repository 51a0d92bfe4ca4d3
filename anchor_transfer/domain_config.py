"""
Domain configuration documents (stellar.toml).

An issuer's home domain publishes a TOML document at a well-known path.
Only three fields matter here:

    TRANSFER_SERVER          SEP-6 transfer server base URL
    TRANSFER_SERVER_SEP0024  SEP-24 (interactive) transfer server base URL
    CURRENCIES               list of {code, issuer} tables

Resolution is behind the ``DomainConfigResolver`` protocol so the
discovery pipeline can be tested without network access.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from anchor_transfer.assets import Asset
from anchor_transfer.errors import DomainConfigError
from anchor_transfer.transport import HttpTransport, HttpxTransport

WELL_KNOWN_PATH = "/.well-known/stellar.toml"


@dataclass(frozen=True)
class DomainConfig:
    """The subset of a domain configuration document we consume."""

    transfer_server: str | None = None
    transfer_server_sep0024: str | None = None
    currencies: tuple[Asset, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def transfer_server_url(self) -> str | None:
        """Declared transfer server; the unversioned field wins."""
        return self.transfer_server or self.transfer_server_sep0024

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainConfig:
        currencies = []
        for entry in data.get("CURRENCIES") or []:
            if not isinstance(entry, dict):
                continue
            code = entry.get("code")
            issuer = entry.get("issuer")
            if isinstance(code, str) and code and isinstance(issuer, str) and issuer:
                currencies.append(Asset(code=code, issuer=issuer))

        return cls(
            transfer_server=_url_field(data, "TRANSFER_SERVER"),
            transfer_server_sep0024=_url_field(data, "TRANSFER_SERVER_SEP0024"),
            currencies=tuple(currencies),
            raw=data,
        )


def _url_field(data: dict[str, Any], name: str) -> str | None:
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def parse_domain_config(text: str) -> DomainConfig:
    """Parse a stellar.toml document.

    Raises:
        DomainConfigError: If the text is not valid TOML.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise DomainConfigError(f"Invalid stellar.toml: {e}") from e
    return DomainConfig.from_dict(data)


@runtime_checkable
class DomainConfigResolver(Protocol):
    """Interface for looking up a domain's configuration document."""

    async def resolve(self, domain: str) -> DomainConfig:
        """Fetch and parse the configuration document for ``domain``."""
        ...


class StellarTomlResolver:
    """Resolves ``https://{domain}/.well-known/stellar.toml``.

    Args:
        transport: Injectable transport. Defaults to HttpxTransport.
        allow_http: Use plain http (local test anchors only).
    """

    def __init__(
        self,
        transport: HttpTransport | None = None,
        *,
        allow_http: bool = False,
    ) -> None:
        self._transport = transport or HttpxTransport()
        self._scheme = "http" if allow_http else "https"

    def config_url(self, domain: str) -> str:
        return f"{self._scheme}://{domain.strip().rstrip('/')}{WELL_KNOWN_PATH}"

    async def resolve(self, domain: str) -> DomainConfig:
        url = self.config_url(domain)
        response = await self._transport.request("GET", url, headers={"Accept": "*/*"})
        if response.status_code != 200:
            raise DomainConfigError(
                f"Fetching stellar.toml of {domain} failed with status {response.status_code}",
                details={"domain": domain, "url": url, "status_code": response.status_code},
            )
        try:
            return parse_domain_config(response.text)
        except DomainConfigError as e:
            e.details.update({"domain": domain, "url": url})
            raise
