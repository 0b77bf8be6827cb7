"""
escrow.adapters.memory — in-memory reference ledger for tests, simulation and the CLI.

InMemoryLedger implements every collaborator the engine consumes:

    ledger            AccountStore (balances, data, asset views, event journal)
    ledger.native     NativeTransferService
    ledger.assets     AssetTransferService
    ledger.rent       RetentionPolicy

Atomicity
---------
All mutations of one invocation run inside `ledger.transaction(signers)`. The
context manager snapshots state on entry and restores it (dropping staged events)
if anything raises. On a clean exit, accounts the transaction drained to a zero
native balance are purged together with their data, so a closed escrow record
ceases to exist. Accounts that were already empty, or that still hold asset units,
are left alone.

Signature rules
---------------
* A native transfer source must be a transaction signer.
* An asset authority is either a signer (Authorization without proof) or the
  delegated authority carrying a proof that re-derives its identity.

Usage
-----
    ledger = InMemoryLedger()
    ledger.fund(alice, 10**9)
    ledger.create_mint(mint, decimals=0, supply=1)
    ledger.create_token_account(held, mint=mint, owner=alice, amount=1)
    with ledger.transaction([alice]) as tx:
        ...
    tx.events  # events committed by that transaction
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from ..config import U64_MAX
from ..errors import (
    AccountAlreadyInitialized,
    AccountNotFound,
    AmountOverflow,
    AuthorityMismatch,
    InsufficientFunds,
    InvalidAccountData,
    MissingRequiredSignature,
)
from ..runtime.authority import Authorization, verify_authorization
from ..runtime.system import ensure_identity, short_hex
from ..types.accounts import Mint, TokenAccount
from ..types.events import (
    ASSET_TRANSFER,
    CLOSE_ACCOUNT,
    NATIVE_TRANSFER,
    SET_AUTHORITY,
    LedgerEvent,
)
from .rent import RentPolicy

log = logging.getLogger(__name__)

TOKEN_ACCOUNT_SIZE = 165
MINT_SIZE = 82


def _check_u64(value: int, name: str) -> int:
    v = int(value)
    if not 0 <= v <= U64_MAX:
        raise ValueError(f"{name} must fit in u64, got {v}")
    return v


class _Tx:
    """Handle for an open (or finished) ledger transaction."""

    def __init__(self, ledger: "InMemoryLedger", signers: FrozenSet[bytes], start: int) -> None:
        self._ledger = ledger
        self.signers = signers
        self._start = start

    @property
    def events(self) -> Tuple[LedgerEvent, ...]:
        return tuple(self._ledger.events[self._start:])


class InMemoryLedger:
    def __init__(self, rent: Optional[RentPolicy] = None) -> None:
        self.balances: Dict[bytes, int] = {}
        self.data: Dict[bytes, bytes] = {}
        self.token_accounts: Dict[bytes, TokenAccount] = {}
        self.mints: Dict[bytes, Mint] = {}
        self.events: List[LedgerEvent] = []
        self._signers: Optional[FrozenSet[bytes]] = None

        self.rent = rent or RentPolicy()
        self.native = NativeTransfers(self)
        self.assets = AssetTransfers(self)

    # ------------------------------------------------------------------ #
    # Setup helpers
    # ------------------------------------------------------------------ #

    def fund(self, key: bytes, amount: int) -> None:
        key = ensure_identity(key, name="key")
        total = self.balances.get(key, 0) + int(amount)
        self.balances[key] = _check_u64(total, "balance")

    def create_account(
        self,
        key: bytes,
        *,
        size: int = 0,
        data: Optional[bytes] = None,
        balance: Optional[int] = None,
    ) -> None:
        """Allocate an account with `size` zero bytes (or explicit `data`)."""
        key = ensure_identity(key, name="key")
        if key in self.data or key in self.token_accounts:
            raise AccountAlreadyInitialized("account already exists", account="0x" + key.hex())
        blob = bytes(data) if data is not None else bytes(size)
        self.data[key] = blob
        if balance is None:
            balance = self.rent.minimum_balance(len(blob))
        self.balances[key] = _check_u64(balance, "balance")

    def create_mint(self, key: bytes, *, decimals: int = 0, supply: int = 0) -> Mint:
        key = ensure_identity(key, name="key")
        mint = Mint(decimals=decimals, supply=supply)
        self.mints[key] = mint
        self.balances.setdefault(key, self.rent.minimum_balance(MINT_SIZE))
        return mint

    def create_token_account(
        self,
        key: bytes,
        *,
        mint: bytes,
        owner: bytes,
        amount: int = 0,
        balance: Optional[int] = None,
    ) -> TokenAccount:
        key = ensure_identity(key, name="key")
        if key in self.token_accounts:
            raise AccountAlreadyInitialized("token account already exists", account="0x" + key.hex())
        acc = TokenAccount(
            mint=ensure_identity(mint, name="mint"),
            owner=ensure_identity(owner, name="owner"),
            amount=_check_u64(amount, "amount"),
        )
        self.token_accounts[key] = acc
        if balance is None:
            balance = self.rent.minimum_balance(TOKEN_ACCOUNT_SIZE)
        self.balances[key] = _check_u64(balance, "balance")
        return acc

    def exists(self, key: bytes) -> bool:
        return key in self.balances or key in self.data or key in self.token_accounts

    # ------------------------------------------------------------------ #
    # AccountStore
    # ------------------------------------------------------------------ #

    def get_balance(self, key: bytes) -> int:
        return self.balances.get(key, 0)

    def set_balance(self, key: bytes, value: int) -> None:
        self.balances[ensure_identity(key, name="key")] = _check_u64(value, "balance")

    def get_data(self, key: bytes) -> bytes:
        return self.data.get(key, b"")

    def set_data(self, key: bytes, data: bytes) -> None:
        if key not in self.data:
            raise AccountNotFound("cannot write data of an unallocated account", account="0x" + key.hex())
        if len(data) != len(self.data[key]):
            raise InvalidAccountData(
                "data size cannot change", expected=len(self.data[key]), actual=len(data)
            )
        self.data[key] = bytes(data)

    def get_token_account(self, key: bytes) -> Optional[TokenAccount]:
        return self.token_accounts.get(key)

    def get_mint(self, key: bytes) -> Optional[Mint]:
        return self.mints.get(key)

    def emit(self, event: LedgerEvent) -> None:
        self.events.append(event)

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    def is_signer(self, key: bytes) -> bool:
        return self._signers is not None and key in self._signers

    @contextmanager
    def transaction(self, signers: Iterable[bytes] = ()) -> Iterator[_Tx]:
        """
        Run a batch of mutations atomically. Nested transactions are not supported.
        """
        if self._signers is not None:
            raise RuntimeError("ledger transaction already open")
        snapshot = (
            dict(self.balances),
            dict(self.data),
            dict(self.token_accounts),
            dict(self.mints),
            len(self.events),
        )
        self._signers = frozenset(bytes(s) for s in signers)
        tx = _Tx(self, self._signers, snapshot[4])
        try:
            yield tx
        except BaseException:
            self.balances, self.data, self.token_accounts, self.mints = (
                snapshot[0],
                snapshot[1],
                snapshot[2],
                snapshot[3],
            )
            del self.events[snapshot[4]:]
            log.debug("ledger transaction rolled back")
            raise
        else:
            self._purge_drained(snapshot[0])
        finally:
            self._signers = None

    def _purge_drained(self, before: Dict[bytes, int]) -> None:
        """Drop accounts this transaction drained to zero, unless they still hold units."""
        for key in [k for k, v in self.balances.items() if v == 0 and before.get(k, 0) > 0]:
            acc = self.token_accounts.get(key)
            if acc is not None and acc.amount > 0:
                continue
            del self.balances[key]
            self.data.pop(key, None)
            self.token_accounts.pop(key, None)


class NativeTransfers:
    """NativeTransferService over an InMemoryLedger."""

    def __init__(self, ledger: InMemoryLedger) -> None:
        self._ledger = ledger

    def transfer(self, amount: int, source: bytes, target: bytes) -> None:
        ledger = self._ledger
        if amount < 0:
            raise ValueError("amount must be non-negative")
        if not ledger.is_signer(source):
            raise MissingRequiredSignature("native transfer source must sign", source="0x" + source.hex())
        have = ledger.get_balance(source)
        if have < amount:
            raise InsufficientFunds(source="0x" + source.hex(), balance=have, amount=amount)
        if source != target:
            dest = ledger.get_balance(target) + amount
            if dest > U64_MAX:
                raise AmountOverflow("target balance would overflow", target="0x" + target.hex())
            ledger.set_balance(source, have - amount)
            ledger.set_balance(target, dest)
        ledger.emit(LedgerEvent(NATIVE_TRANSFER, source, target, amount))
        log.debug("native %d %s -> %s", amount, short_hex(source), short_hex(target))


class AssetTransfers:
    """AssetTransferService over an InMemoryLedger."""

    def __init__(self, ledger: InMemoryLedger) -> None:
        self._ledger = ledger

    def _account(self, key: bytes) -> TokenAccount:
        acc = self._ledger.get_token_account(key)
        if acc is None:
            raise InvalidAccountData("not a token account", account="0x" + key.hex())
        return acc

    def _authorize(self, key: bytes, auth: Authorization, operation: str) -> TokenAccount:
        acc = self._account(key)
        if auth.operation != operation:
            raise MissingRequiredSignature(
                "authorization was issued for another operation",
                issued=auth.operation,
                requested=operation,
            )
        if acc.owner != auth.identity:
            raise AuthorityMismatch(
                account="0x" + key.hex(),
                owner="0x" + acc.owner.hex(),
                presented="0x" + auth.identity.hex(),
            )
        if auth.is_delegated:
            if not verify_authorization(auth):
                raise MissingRequiredSignature("delegated authority proof does not verify")
        elif not self._ledger.is_signer(auth.identity):
            raise MissingRequiredSignature(
                "asset authority must sign", authority="0x" + auth.identity.hex()
            )
        return acc

    def transfer(
        self, amount: int, source: bytes, destination: bytes, authority: Authorization
    ) -> None:
        src = self._authorize(source, authority, "transfer")
        dst = self._account(destination)
        if src.mint != dst.mint:
            raise InvalidAccountData("token accounts have different mints")
        if src.amount < amount:
            raise InsufficientFunds(account="0x" + source.hex(), balance=src.amount, amount=amount)
        if source != destination:
            if dst.amount + amount > U64_MAX:
                raise AmountOverflow("token balance would overflow")
            self._ledger.token_accounts[source] = replace(src, amount=src.amount - amount)
            self._ledger.token_accounts[destination] = replace(dst, amount=dst.amount + amount)
        self._ledger.emit(LedgerEvent(ASSET_TRANSFER, source, destination, amount))

    def set_authority(
        self, account: bytes, new_authority: bytes, current_authority: Authorization
    ) -> None:
        acc = self._authorize(account, current_authority, "set_authority")
        new_authority = ensure_identity(new_authority, name="new_authority")
        self._ledger.token_accounts[account] = replace(acc, owner=new_authority)
        self._ledger.emit(LedgerEvent(SET_AUTHORITY, account, new_authority))

    def close(self, account: bytes, refund_target: bytes, authority: Authorization) -> None:
        acc = self._authorize(account, authority, "close")
        if acc.amount != 0:
            raise InvalidAccountData("cannot close a token account with a balance", amount=acc.amount)
        ledger = self._ledger
        refunded = ledger.get_balance(account)
        total = ledger.get_balance(refund_target) + refunded
        if total > U64_MAX:
            raise AmountOverflow("refund target balance would overflow")
        ledger.set_balance(refund_target, total)
        del ledger.token_accounts[account]
        ledger.balances.pop(account, None)
        ledger.emit(LedgerEvent(CLOSE_ACCOUNT, account, refund_target, refunded))


__all__ = ["InMemoryLedger", "NativeTransfers", "AssetTransfers", "TOKEN_ACCOUNT_SIZE"]
