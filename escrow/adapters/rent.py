"""
escrow.adapters.rent — minimum-balance policy for accounts that persist data.

An account holding `size` bytes of data is exempt from collection when its
native balance covers two years of storage at the default rate:

    minimum_balance(size) = (128 + size) * 3480 * 2

The 128-byte overhead accounts for the account header itself.
"""

from __future__ import annotations

from dataclasses import dataclass

ACCOUNT_STORAGE_OVERHEAD = 128
DEFAULT_LAMPORTS_PER_BYTE_YEAR = 3480
DEFAULT_EXEMPTION_THRESHOLD = 2


@dataclass(frozen=True)
class RentPolicy:
    lamports_per_byte_year: int = DEFAULT_LAMPORTS_PER_BYTE_YEAR
    exemption_threshold: int = DEFAULT_EXEMPTION_THRESHOLD
    overhead: int = ACCOUNT_STORAGE_OVERHEAD

    def minimum_balance(self, data_size: int) -> int:
        if data_size < 0:
            raise ValueError("data_size must be non-negative")
        return (self.overhead + data_size) * self.lamports_per_byte_year * self.exemption_threshold

    def is_exempt(self, balance: int, data_size: int) -> bool:
        return balance >= self.minimum_balance(data_size)


__all__ = ["RentPolicy", "ACCOUNT_STORAGE_OVERHEAD"]
