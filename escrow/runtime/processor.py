"""
escrow.runtime.processor — the exchange engine: InitEscrow and Exchange handlers.

`ExchangeEngine.process(data, accounts)` decodes the instruction bytes and routes
to the matching handler. Handlers read positional accounts, validate everything
fail-fast, then issue collaborator calls in a fixed order. The engine relies on
the enclosing ledger transaction to undo work when a later call fails; it never
issues a transfer before all of its own checks have passed.

InitEscrow accounts
-------------------
  0. [signer]   initializer
  1. [writable] held account (token account owned by the initializer)
  2. []         mint
  3. [writable] escrow record slot (pre-allocated, retention-exempt)
  4. [writable] fee recipient

Exchange accounts
-----------------
  0. [signer]   taker
  1. [writable] taker's destination token account
  2. [writable] held account (controlled by the delegated authority)
  3. [writable] initializer's receiving account
  4. [writable] escrow record
  5. [writable] fee recipient
  6. []         mint
  7. []         metadata account (must be derive_address(mint), even if empty)
  8.. []        creator payout accounts, in metadata order

Exchange with taker == initializer is a cancellation: no tax, royalty or payment,
only the asset return and the two closures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from ..adapters.interfaces import (
    AccountStore,
    AssetTransferService,
    MetadataProvider,
    NativeTransferService,
    RetentionPolicy,
)
from ..config import EngineConfig
from ..errors import (
    AccountAlreadyInitialized,
    ExpectedAmountMismatch,
    InvalidAccountData,
    InvalidMintAccount,
    InvalidSalesTaxRecipient,
    InvalidTokenAmount,
    MissingRequiredSignature,
    NotEnoughAccountKeys,
    NotRentExempt,
)
from ..state.records import EscrowRecordStore
from ..types.accounts import AccountMeta, Mint, TokenAccount
from ..types.instruction import InitEscrow, unpack
from ..types.metadata import Metadata
from ..types.record import EscrowRecord
from .authority import DelegatedAuthority, signer_authorization
from .fees import SettlementPlan, plan_settlement
from .system import short_hex

log = logging.getLogger(__name__)

INIT_ACCOUNTS = 5
EXCHANGE_ACCOUNTS = 8


@dataclass(frozen=True)
class Processed:
    """What a successful handler did: its name and the native value it moved by kind."""
    instruction: str
    values: Dict[str, int] = field(default_factory=dict)


def _take(accounts: Sequence[AccountMeta], n: int, instruction: str) -> Tuple[AccountMeta, ...]:
    if len(accounts) < n:
        raise NotEnoughAccountKeys(
            f"{instruction} needs {n} accounts", expected=n, actual=len(accounts)
        )
    return tuple(accounts[:n])


class ExchangeEngine:
    """
    Escrow engine bound to an immutable configuration and its collaborators.

    Parameters
    ----------
    config : EngineConfig
        Fee schedule, authority seed/salt and metadata program.
    accounts : AccountStore
        Balances, account data and asset-account views.
    assets : AssetTransferService
    native : NativeTransferService
    retention : RetentionPolicy
    metadata : MetadataProvider
    authority : DelegatedAuthority, optional
        Injected capability; derived from `config` when omitted.
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        accounts: AccountStore,
        assets: AssetTransferService,
        native: NativeTransferService,
        retention: RetentionPolicy,
        metadata: MetadataProvider,
        authority: Optional[DelegatedAuthority] = None,
    ) -> None:
        self.config = config
        self._accounts = accounts
        self._assets = assets
        self._native = native
        self._retention = retention
        self._metadata = metadata
        self._records = EscrowRecordStore(accounts)
        self.authority = authority or DelegatedAuthority.from_config(config)

    @classmethod
    def for_ledger(
        cls,
        config: EngineConfig,
        ledger,
        metadata: MetadataProvider,
        *,
        authority: Optional[DelegatedAuthority] = None,
    ) -> "ExchangeEngine":
        """Wire an engine to a ledger exposing `.assets`, `.native` and `.rent`."""
        return cls(
            config,
            accounts=ledger,
            assets=ledger.assets,
            native=ledger.native,
            retention=ledger.rent,
            metadata=metadata,
            authority=authority,
        )

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    def process(self, data: bytes, accounts: Sequence[AccountMeta]) -> Processed:
        instruction = unpack(data)
        if isinstance(instruction, InitEscrow):
            log.info("Instruction: InitEscrow")
            return self.init_escrow(accounts, instruction.amount)
        log.info("Instruction: Exchange")
        return self.exchange(accounts, instruction.amount)

    # ------------------------------------------------------------------ #
    # Shared checks
    # ------------------------------------------------------------------ #

    def _token_account(self, key: bytes) -> TokenAccount:
        acc = self._accounts.get_token_account(key)
        if acc is None:
            raise InvalidAccountData("not a token account", account="0x" + key.hex())
        return acc

    def _mint(self, key: bytes) -> Mint:
        mint = self._accounts.get_mint(key)
        if mint is None:
            raise InvalidAccountData("not a mint", account="0x" + key.hex())
        return mint

    def _check_fee_recipient(self, key: bytes) -> None:
        expected = self.config.fees.fee_recipient
        if key != expected:
            log.warning(
                "invalid sales tax recipient: passed %s / expected %s",
                short_hex(key),
                short_hex(expected),
            )
            raise InvalidSalesTaxRecipient(
                passed="0x" + key.hex(), expected="0x" + expected.hex()
            )

    # ------------------------------------------------------------------ #
    # InitEscrow
    # ------------------------------------------------------------------ #

    def init_escrow(self, accounts: Sequence[AccountMeta], amount: int) -> Processed:
        initializer, held, mint_meta, escrow, fee_recipient = _take(
            accounts, INIT_ACCOUNTS, "InitEscrow"
        )

        if not initializer.is_signer:
            raise MissingRequiredSignature("initializer must sign")

        mint = self._mint(mint_meta.key)
        held_acc = self._token_account(held.key)
        if held_acc.mint != mint_meta.key:
            log.warning(
                "mint account mismatch: %s / %s",
                short_hex(mint_meta.key),
                short_hex(held_acc.mint),
            )
            raise InvalidMintAccount(
                passed="0x" + mint_meta.key.hex(), held="0x" + held_acc.mint.hex()
            )
        if held_acc.amount != mint.one_unit:
            log.warning("invalid ui amount (%d/%d)", held_acc.amount, mint.decimals)
            raise InvalidTokenAmount(amount=held_acc.amount, decimals=mint.decimals)

        if not self._retention.is_exempt(
            self._accounts.get_balance(escrow.key), self._records.data_len(escrow.key)
        ):
            raise NotRentExempt(account="0x" + escrow.key.hex())

        if self._records.load_unchecked(escrow.key).is_initialized():
            raise AccountAlreadyInitialized("escrow record already initialized")

        self._check_fee_recipient(fee_recipient.key)

        listing_fee = self.config.fees.listing_fee
        if listing_fee > 0:
            self._native.transfer(listing_fee, initializer.key, fee_recipient.key)

        self._records.save(
            escrow.key,
            EscrowRecord(
                initialized=True,
                initializer_identity=initializer.key,
                mint_identity=mint_meta.key,
                held_account_identity=held.key,
                expected_amount=amount,
            ),
        )

        log.info("transferring held account control to the delegated authority")
        self._assets.set_authority(
            held.key,
            self.authority.identity,
            signer_authorization(initializer.key, "set_authority"),
        )
        return Processed("init_escrow", {"listing_fee": listing_fee})

    # ------------------------------------------------------------------ #
    # Exchange
    # ------------------------------------------------------------------ #

    def exchange(
        self, accounts: Sequence[AccountMeta], amount_expected_by_taker: int
    ) -> Processed:
        (
            taker,
            destination,
            held,
            initializer,
            escrow,
            fee_recipient,
            mint,
            metadata_account,
        ) = _take(accounts, EXCHANGE_ACCOUNTS, "Exchange")
        creator_keys = tuple(a.key for a in accounts[EXCHANGE_ACCOUNTS:])

        if not taker.is_signer:
            raise MissingRequiredSignature("taker must sign")

        held_acc = self._token_account(held.key)
        if amount_expected_by_taker != held_acc.amount:
            raise ExpectedAmountMismatch(
                expected=amount_expected_by_taker, held=held_acc.amount
            )
        log.info("amount: %d", amount_expected_by_taker)

        record = self._records.load(escrow.key)
        if record.held_account_identity != held.key:
            log.warning("held account is not the one recorded in the escrow")
            raise InvalidAccountData("held account mismatch")
        if record.initializer_identity != initializer.key:
            log.warning("escrow record does not belong to the initializer")
            raise InvalidAccountData("initializer account mismatch")
        self._check_fee_recipient(fee_recipient.key)
        if record.mint_identity != mint.key:
            log.warning(
                "mint in escrow %s doesn't match passed mint %s",
                short_hex(record.mint_identity),
                short_hex(mint.key),
            )
            raise InvalidAccountData("mint mismatch")
        derived = self._metadata.derive_address(mint.key)
        if derived != metadata_account.key:
            log.warning(
                "mint-derived metadata account %s doesn't match passed metadata account %s",
                short_hex(derived),
                short_hex(metadata_account.key),
            )
            raise InvalidAccountData("metadata account mismatch")

        values: Dict[str, int] = {}
        if taker.key != record.initializer_identity:
            plan = plan_settlement(
                record.expected_amount,
                self.config.fees,
                self._load_metadata(metadata_account.key, creator_keys),
                creator_keys,
            )
            self._pay(plan, taker.key, fee_recipient.key, record.initializer_identity)
            values = plan.value_breakdown()
        else:
            log.info("taker is the initializer, cancelling escrow")

        release = self.authority.identity
        log.info("transferring held unit to the taker")
        self._assets.transfer(
            held_acc.amount,
            held.key,
            destination.key,
            self.authority.sign_for(release, "transfer"),
        )
        log.info("closing held account")
        self._assets.close(
            held.key, initializer.key, self.authority.sign_for(release, "close")
        )
        log.info("closing the escrow record")
        self._records.close(escrow.key, initializer.key)
        return Processed("exchange", values)

    def _load_metadata(
        self, key: bytes, creator_keys: Tuple[bytes, ...]
    ) -> Optional[Metadata]:
        outcome = self._metadata.parse(self._accounts.get_data(key))
        if outcome.is_ok:
            return outcome.metadata
        if not outcome.recoverable:
            raise outcome.error
        log.info(
            "no metadata found or metadata invalid, skipping royalties: %s", outcome.error
        )
        if creator_keys:
            log.debug("ignoring %d creator accounts without metadata", len(creator_keys))
        return None

    def _pay(
        self, plan: SettlementPlan, taker: bytes, fee_recipient: bytes, seller: bytes
    ) -> None:
        log.info("transferring sales tax %d", plan.tax)
        self._native.transfer(plan.tax, taker, fee_recipient)
        if plan.payouts:
            log.info("disbursing royalties %d", plan.royalty_total)
        for creator, amount in plan.payouts:
            self._native.transfer(amount, taker, creator)
        log.info("transferring payment %d to initializer", plan.final_amount)
        self._native.transfer(plan.final_amount, taker, seller)


__all__ = ["ExchangeEngine", "Processed", "INIT_ACCOUNTS", "EXCHANGE_ACCOUNTS"]
