"""
escrow.types.accounts — account references and asset-account views.

* AccountMeta is what a caller supplies for each positional account role of an
  instruction: the identity and whether the caller signed for it.
* TokenAccount / Mint are read-only views the asset service exposes for the held
  account and its mint. The engine never mutates them directly; it goes through
  the asset transfer service.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..runtime.system import ensure_identity


@dataclass(frozen=True)
class AccountMeta:
    key: bytes
    is_signer: bool = False
    is_writable: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", ensure_identity(self.key, name="key"))

    @classmethod
    def signer(cls, key: bytes) -> "AccountMeta":
        return cls(key=key, is_signer=True)

    @classmethod
    def readonly(cls, key: bytes) -> "AccountMeta":
        return cls(key=key, is_writable=False)


@dataclass(frozen=True)
class TokenAccount:
    """Holding of a fungible asset: which mint, who controls it, how many units."""
    mint: bytes
    owner: bytes
    amount: int = 0


@dataclass(frozen=True)
class Mint:
    """Asset type descriptor. One whole unit is `10 ** decimals` base units."""
    decimals: int = 0
    supply: int = 0

    @property
    def one_unit(self) -> int:
        return 10 ** int(self.decimals)


__all__ = ["AccountMeta", "TokenAccount", "Mint"]
