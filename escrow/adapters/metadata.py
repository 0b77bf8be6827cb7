"""
escrow.adapters.metadata — CBOR metadata records and their derived addresses.

Wire shape (CBOR map, canonical encoding):

    {
      "seller_fee_bps": <uint, royalty rate in basis points>,
      "creators":       [[<bytes32 address>, <uint percent share>], ...] | null
    }

Parsing never raises; it returns a MetadataOutcome the engine acts on:

    empty / all-zero account data          -> skip  MissingMetadata
    undecodable or wrongly-shaped data     -> skip  InvalidMetadata
    bps outside u16 or share outside u8    -> fatal NumericConversionFailed
    creator shares not summing to 100      -> fatal InvalidMetadata

A `null` creators entry decodes to `creators=None`: the record names no creators,
so no payout accounts are checked. An empty list decodes to `()`.
"""

from __future__ import annotations

import hashlib
from typing import Any, List, Optional

import cbor2

from ..errors import InvalidMetadata, MissingMetadata, NumericConversionFailed
from ..runtime.system import IDENTITY_SIZE, ensure_identity
from ..types.metadata import Creator, Metadata, MetadataOutcome

METADATA_SEED = b"metadata"
U16_MAX = 0xFFFF
U8_MAX = 0xFF


def _is_uint(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and x >= 0


class CborMetadataProvider:
    """MetadataProvider for records stored as CBOR under `metadata_program_id`."""

    def __init__(self, metadata_program_id: bytes) -> None:
        self.program_id = ensure_identity(metadata_program_id, name="metadata_program_id")

    @classmethod
    def from_config(cls, config) -> "CborMetadataProvider":
        return cls(config.metadata_program_id)

    def derive_address(self, mint: bytes) -> bytes:
        h = hashlib.sha3_256()
        h.update(METADATA_SEED)
        h.update(self.program_id)
        h.update(ensure_identity(mint, name="mint"))
        return h.digest()

    def parse(self, data: bytes) -> MetadataOutcome:
        if not data or not any(data):
            return MetadataOutcome.skip(MissingMetadata("no metadata stored for mint"))
        try:
            obj = cbor2.loads(bytes(data))
        except (ValueError, TypeError, EOFError) as e:
            return MetadataOutcome.skip(InvalidMetadata("metadata is not valid CBOR", reason=str(e)))

        if not isinstance(obj, dict) or "seller_fee_bps" not in obj:
            return MetadataOutcome.skip(InvalidMetadata("metadata has the wrong shape"))
        bps = obj["seller_fee_bps"]
        raw_creators = obj.get("creators")
        if not isinstance(bps, int) or isinstance(bps, bool):
            return MetadataOutcome.skip(InvalidMetadata("seller_fee_bps is not an integer"))
        if raw_creators is not None and not isinstance(raw_creators, list):
            return MetadataOutcome.skip(InvalidMetadata("creators is not a list"))

        entries: List[tuple] = []
        for entry in raw_creators or ():
            if (
                not isinstance(entry, list)
                or len(entry) != 2
                or not isinstance(entry[0], bytes)
                or len(entry[0]) != IDENTITY_SIZE
                or not isinstance(entry[1], int)
                or isinstance(entry[1], bool)
            ):
                return MetadataOutcome.skip(InvalidMetadata("malformed creator entry"))
            entries.append((entry[0], entry[1]))

        if not 0 <= bps <= U16_MAX:
            return MetadataOutcome.fatal(
                NumericConversionFailed("seller_fee_bps out of range", seller_fee_bps=bps)
            )
        for address, share in entries:
            if not 0 <= share <= U8_MAX:
                return MetadataOutcome.fatal(
                    NumericConversionFailed(
                        "creator share out of range", creator="0x" + address.hex(), share=share
                    )
                )
        if entries and sum(share for _, share in entries) != 100:
            return MetadataOutcome.fatal(
                InvalidMetadata(
                    "creator shares must sum to 100",
                    total=sum(share for _, share in entries),
                )
            )

        creators = None
        if raw_creators is not None:
            creators = tuple(Creator(address=a, share=s) for a, s in entries)
        return MetadataOutcome.ok(Metadata(seller_fee_bps=bps, creators=creators))

    @staticmethod
    def encode(metadata: Metadata) -> bytes:
        """Canonical CBOR encoding of `metadata` (fixtures, CLI)."""
        creators: Optional[list] = None
        if metadata.creators is not None:
            creators = [[c.address, int(c.share)] for c in metadata.creators]
        return cbor2.dumps(
            {"seller_fee_bps": int(metadata.seller_fee_bps), "creators": creators},
            canonical=True,
        )


__all__ = ["CborMetadataProvider", "METADATA_SEED"]
