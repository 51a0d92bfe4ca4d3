"""Asset identity: (code, issuer) pairs and the native asset."""

from __future__ import annotations

from dataclasses import dataclass

from anchor_transfer.errors import AssetNotIssuedError

NATIVE_ASSET_CODE = "XLM"


@dataclass(frozen=True)
class Asset:
    """A tokenized asset.

    Issued assets are identified by ``(code, issuer)``. The native asset
    has no issuer and therefore never has a transfer server.
    """

    code: str
    issuer: str | None = None

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("asset code must be non-empty")
        if self.issuer == "":
            raise ValueError("asset issuer must be non-empty or None")

    @classmethod
    def native(cls) -> Asset:
        return cls(code=NATIVE_ASSET_CODE, issuer=None)

    @property
    def is_native(self) -> bool:
        return self.issuer is None

    def require_issuer(self) -> str:
        """The issuer account ID; raises for the native asset."""
        if self.issuer is None:
            raise AssetNotIssuedError(
                "Native asset does not have an issuer account.",
                details={"code": self.code},
            )
        return self.issuer

    def __str__(self) -> str:
        if self.issuer is None:
            return "native"
        return f"{self.code}:{self.issuer}"
