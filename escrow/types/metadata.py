"""
escrow.types.metadata — semantic view of an asset's metadata record.

Only two fields are consumed by the engine: the royalty rate (`seller_fee_bps`)
and the ordered creator list with percentage shares. Any "primary sale happened"
flag some record formats carry is deliberately not modelled: royalties are paid on
every settlement.

MetadataOutcome is the explicit result of a metadata lookup. It is either a parsed
Metadata or an error, and the error is tagged as recoverable (the engine settles
with zero royalty) or fatal (the engine aborts).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import EscrowError


@dataclass(frozen=True)
class Creator:
    address: bytes
    share: int  # percent, 0..100


@dataclass(frozen=True)
class Metadata:
    seller_fee_bps: int
    creators: Optional[Tuple[Creator, ...]] = None  # None: record carries no creator list

    def creator_addresses(self) -> Tuple[bytes, ...]:
        return tuple(c.address for c in self.creators or ())


@dataclass(frozen=True)
class MetadataOutcome:
    metadata: Optional[Metadata] = None
    error: Optional[EscrowError] = None
    recoverable: bool = True

    @classmethod
    def ok(cls, metadata: Metadata) -> "MetadataOutcome":
        return cls(metadata=metadata)

    @classmethod
    def skip(cls, error: EscrowError) -> "MetadataOutcome":
        """Metadata absent or undecodable; settle without royalties."""
        return cls(error=error, recoverable=True)

    @classmethod
    def fatal(cls, error: EscrowError) -> "MetadataOutcome":
        """Metadata decoded but its rate data is unsafe to settle against."""
        return cls(error=error, recoverable=False)

    @property
    def is_ok(self) -> bool:
        return self.metadata is not None and self.error is None


__all__ = ["Creator", "Metadata", "MetadataOutcome"]
