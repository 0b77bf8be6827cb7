"""
escrow.types.record — the persisted Escrow Record and its fixed-length layout.

Layout (little-endian amount):

    offset  size  field
    0       1     initialized (0 or 1)
    1       32    initializer_identity
    33      32    mint_identity
    65      32    held_account_identity
    97      8     expected_amount (u64)
    ----    ----
            105   total

A record is either uninitialized (all bytes zero) or initialized with every field
meaningful. Any other `initialized` byte is rejected as InvalidAccountData.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ..errors import InvalidAccountData, UninitializedAccount
from ..runtime.system import ZERO_IDENTITY, ensure_identity

_LAYOUT = struct.Struct("<?32s32s32sQ")


@dataclass(frozen=True)
class EscrowRecord:
    initialized: bool = False
    initializer_identity: bytes = ZERO_IDENTITY
    mint_identity: bytes = ZERO_IDENTITY
    held_account_identity: bytes = ZERO_IDENTITY
    expected_amount: int = 0

    LEN = _LAYOUT.size

    def is_initialized(self) -> bool:
        return self.initialized

    def pack(self) -> bytes:
        for name in ("initializer_identity", "mint_identity", "held_account_identity"):
            ensure_identity(getattr(self, name), name=name)
        return _LAYOUT.pack(
            bool(self.initialized),
            self.initializer_identity,
            self.mint_identity,
            self.held_account_identity,
            int(self.expected_amount),
        )

    @classmethod
    def unpack_unchecked(cls, data: bytes) -> "EscrowRecord":
        """Decode without requiring the record to be initialized."""
        if len(data) != _LAYOUT.size:
            raise InvalidAccountData(
                "escrow record has the wrong length",
                expected=_LAYOUT.size,
                actual=len(data),
            )
        if data[0] not in (0, 1):
            raise InvalidAccountData("escrow record has an invalid initialized flag", flag=data[0])
        initialized, initializer, mint, held, amount = _LAYOUT.unpack(bytes(data))
        return cls(
            initialized=initialized,
            initializer_identity=initializer,
            mint_identity=mint,
            held_account_identity=held,
            expected_amount=amount,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "EscrowRecord":
        """Decode and require an initialized record."""
        record = cls.unpack_unchecked(data)
        if not record.initialized:
            raise UninitializedAccount("escrow record is not initialized")
        return record


RECORD_LEN: int = EscrowRecord.LEN

__all__ = ["EscrowRecord", "RECORD_LEN"]
