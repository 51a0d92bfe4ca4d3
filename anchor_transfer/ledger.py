"""
Ledger boundary — reads an issuer account's declared home domain.

The resolver depends on the ``AccountLedger`` protocol only. The shipped
implementation, ``HorizonLedger``, reads ``GET {horizon}/accounts/{id}``
through an injectable ``HttpTransport``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable
from urllib.parse import quote

from anchor_transfer.config import DEFAULT_HORIZON_URL
from anchor_transfer.errors import LedgerError
from anchor_transfer.transport import HttpTransport, HttpxTransport, join_url


@runtime_checkable
class AccountLedger(Protocol):
    """Interface for reading issuer accounts."""

    async def load_home_domain(self, account_id: str) -> str | None:
        """Return the account's home domain, or None if it has none.

        Raises:
            Exception: When the account could not be read. "Has no
                home domain" is a None result, never an exception.
        """
        ...


class HorizonLedger:
    """AccountLedger backed by a Horizon server.

    Args:
        horizon_url: Horizon base URL.
        transport: Injectable transport. Defaults to HttpxTransport.
    """

    def __init__(
        self,
        horizon_url: str = DEFAULT_HORIZON_URL,
        transport: HttpTransport | None = None,
    ) -> None:
        self._horizon_url = horizon_url
        self._transport = transport or HttpxTransport()

    @property
    def horizon_url(self) -> str:
        return self._horizon_url

    async def load_home_domain(self, account_id: str) -> str | None:
        url = join_url(self._horizon_url, f"/accounts/{quote(account_id, safe='')}")
        response = await self._transport.request("GET", url)

        if response.status_code != 200:
            raise LedgerError(
                f"Loading account {account_id} failed with status {response.status_code}",
                details={"account_id": account_id, "status_code": response.status_code},
            )

        account = response.json()
        if not isinstance(account, dict):
            raise LedgerError(
                f"Horizon returned a malformed account record for {account_id}",
                details={"account_id": account_id},
            )

        home_domain = account.get("home_domain")
        if not isinstance(home_domain, str) or not home_domain.strip():
            return None
        return home_domain.strip()
