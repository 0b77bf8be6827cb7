"""
escrow.adapters.interfaces — collaborator protocols consumed by the engine.

The engine owns validation, arithmetic and orchestration. Everything else is an
external collaborator reached through these protocols:

    AccountStore           native balances, raw account data, asset views, journal
    RetentionPolicy        minimum-balance ("rent exempt") check for persisted data
    AssetTransferService   unit transfers, authority reassignment, account closure
    NativeTransferService  native-value transfers between parties
    MetadataProvider       metadata address derivation and record parsing

Atomicity of one invocation is the ledger's job (see InMemoryLedger.transaction);
none of these calls may partially apply: each returns or raises.
"""

from __future__ import annotations

from typing import Optional, Protocol

from ..runtime.authority import Authorization
from ..types.accounts import Mint, TokenAccount
from ..types.events import LedgerEvent
from ..types.metadata import MetadataOutcome


class AccountStore(Protocol):
    def get_balance(self, key: bytes) -> int: ...
    def set_balance(self, key: bytes, value: int) -> None: ...
    def get_data(self, key: bytes) -> bytes: ...
    def set_data(self, key: bytes, data: bytes) -> None: ...
    def get_token_account(self, key: bytes) -> Optional[TokenAccount]: ...
    def get_mint(self, key: bytes) -> Optional[Mint]: ...
    def emit(self, event: LedgerEvent) -> None: ...


class RetentionPolicy(Protocol):
    def is_exempt(self, balance: int, data_size: int) -> bool: ...


class AssetTransferService(Protocol):
    def transfer(
        self, amount: int, source: bytes, destination: bytes, authority: Authorization
    ) -> None: ...

    def set_authority(
        self, account: bytes, new_authority: bytes, current_authority: Authorization
    ) -> None: ...

    def close(self, account: bytes, refund_target: bytes, authority: Authorization) -> None: ...


class NativeTransferService(Protocol):
    def transfer(self, amount: int, source: bytes, target: bytes) -> None: ...


class MetadataProvider(Protocol):
    def derive_address(self, mint: bytes) -> bytes: ...
    def parse(self, data: bytes) -> MetadataOutcome: ...


__all__ = [
    "AccountStore",
    "RetentionPolicy",
    "AssetTransferService",
    "NativeTransferService",
    "MetadataProvider",
]
