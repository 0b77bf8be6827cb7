"""
escrow.state.records — the Escrow Record Store.

Records live in the data of their escrow account, in the fixed layout of
escrow.types.record. The store is the only writer of that data:

- `load_unchecked` / `load` decode a slot (uninitialized allowed / required)
- `save` persists a populated record into a pre-allocated slot
- `close` returns the slot's retained balance to a beneficiary with an
  overflow-checked u64 addition and zeroes the slot's balance; the ledger then
  drops the zero-balance account, so the record can never be used again.
"""

from __future__ import annotations

import logging

from ..adapters.interfaces import AccountStore
from ..config import U64_MAX
from ..errors import AmountOverflow, InvalidAccountData
from ..types.events import RELEASE_RECORD, LedgerEvent
from ..types.record import RECORD_LEN, EscrowRecord

log = logging.getLogger(__name__)


class EscrowRecordStore:
    def __init__(self, accounts: AccountStore) -> None:
        self._accounts = accounts

    def data_len(self, key: bytes) -> int:
        return len(self._accounts.get_data(key))

    def load_unchecked(self, key: bytes) -> EscrowRecord:
        return EscrowRecord.unpack_unchecked(self._accounts.get_data(key))

    def load(self, key: bytes) -> EscrowRecord:
        return EscrowRecord.unpack(self._accounts.get_data(key))

    def save(self, key: bytes, record: EscrowRecord) -> None:
        if self.data_len(key) != RECORD_LEN:
            raise InvalidAccountData("escrow slot is not allocated for a record")
        self._accounts.set_data(key, record.pack())

    def close(self, key: bytes, beneficiary: bytes) -> int:
        """
        Release the record's balance to `beneficiary`. Returns the amount released.

        Raises:
            AmountOverflow if the beneficiary balance would exceed u64.
        """
        retained = self._accounts.get_balance(key)
        current = self._accounts.get_balance(beneficiary)
        total = current + retained
        if total > U64_MAX:
            raise AmountOverflow(
                "beneficiary balance would overflow",
                balance=current,
                released=retained,
            )
        self._accounts.set_balance(beneficiary, total)
        self._accounts.set_balance(key, 0)
        self._accounts.emit(LedgerEvent(RELEASE_RECORD, key, beneficiary, retained))
        log.debug("escrow record closed, released %d", retained)
        return retained


__all__ = ["EscrowRecordStore"]
