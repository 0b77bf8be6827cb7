"""
escrow.types.events — ledger events emitted by the collaborator services.

Every native transfer, asset transfer, authority change and account closure is
appended to the ledger's journal as a LedgerEvent, in issue order. Events staged
by a failed invocation are discarded together with its state changes.

Kinds:
  - native_transfer : native value moved `source → target`
  - asset_transfer  : asset units moved between token accounts
  - set_authority   : control of `source` (token account) handed to `target`
  - close_account   : `source` closed, its retained balance refunded to `target`
  - release_record  : escrow record balance returned to `target`
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

NATIVE_TRANSFER = "native_transfer"
ASSET_TRANSFER = "asset_transfer"
SET_AUTHORITY = "set_authority"
CLOSE_ACCOUNT = "close_account"
RELEASE_RECORD = "release_record"


@dataclass(frozen=True)
class LedgerEvent:
    kind: str
    source: bytes
    target: bytes
    amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "source": "0x" + self.source.hex(),
            "target": "0x" + self.target.hex(),
            "amount": self.amount,
        }


__all__ = [
    "LedgerEvent",
    "NATIVE_TRANSFER",
    "ASSET_TRANSFER",
    "SET_AUTHORITY",
    "CLOSE_ACCOUNT",
    "RELEASE_RECORD",
]
