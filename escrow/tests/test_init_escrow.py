import pytest

from escrow.runtime.executor import apply_instruction
from escrow.types.events import NATIVE_TRANSFER, SET_AUTHORITY, LedgerEvent
from escrow.types.result import Status

from ._world import (
    ALICE,
    ESCROW,
    FEE,
    HELD,
    LISTING_FEE,
    MINT,
    OTHER_MINT,
    PRICE,
    START,
    STRANGER,
    World,
    make_config,
)


def test_init_escrow_records_listing_and_hands_over_control(world):
    res = world.init()
    assert res.status is Status.SUCCESS
    assert res.instruction == "init_escrow"

    rec = world.record()
    assert rec.is_initialized()
    assert rec.initializer_identity == ALICE
    assert rec.mint_identity == MINT
    assert rec.held_account_identity == HELD
    assert rec.expected_amount == PRICE

    assert world.ledger.get_token_account(HELD).owner == world.engine.authority.identity
    assert world.balance(ALICE) == START - LISTING_FEE
    assert world.balance(FEE) == LISTING_FEE
    assert res.events == (
        LedgerEvent(NATIVE_TRANSFER, ALICE, FEE, LISTING_FEE),
        LedgerEvent(SET_AUTHORITY, HELD, world.engine.authority.identity),
    )


def test_zero_listing_fee_skips_the_transfer():
    w = World(make_config(listing_fee=0))
    res = w.init()
    assert res.is_success
    assert [e.kind for e in res.events] == [SET_AUTHORITY]
    assert w.balance(ALICE) == START


def test_fractional_mint_needs_one_whole_unit():
    w = World(decimals=2)
    assert w.units(HELD) == 100
    assert w.init().is_success


def test_initializer_must_sign(world):
    before = world.snapshot()
    res = world.init(signer=False)
    assert res.error_code == "MISSING_REQUIRED_SIGNATURE"
    assert world.snapshot() == before


def test_too_few_accounts(world):
    from escrow.types.instruction import InitEscrow, pack

    res = apply_instruction(
        world.engine, world.ledger, pack(InitEscrow(PRICE)), world.init_accounts()[:4]
    )
    assert res.error_code == "NOT_ENOUGH_ACCOUNT_KEYS"


def test_garbage_instruction(world):
    res = apply_instruction(world.engine, world.ledger, b"\x07", world.init_accounts())
    assert res.error_code == "INVALID_INSTRUCTION"
    assert res.error["number"] == 0
    assert res.instruction is None


def test_mint_must_match_held_account(world):
    res = world.init(mint=OTHER_MINT)
    assert res.error_code == "INVALID_MINT_ACCOUNT"
    assert res.error["number"] == 6


def test_mint_account_must_be_a_mint(world):
    assert world.init(mint=STRANGER).error_code == "INVALID_ACCOUNT_DATA"


def test_held_account_must_be_a_token_account(world):
    assert world.init(held=STRANGER).error_code == "INVALID_ACCOUNT_DATA"


@pytest.mark.parametrize("amount", [0, 2])
def test_held_amount_must_be_exactly_one_unit(amount):
    w = World(held_amount=amount)
    res = w.init()
    assert res.error_code == "INVALID_TOKEN_AMOUNT"
    assert res.error["number"] == 7


def test_record_slot_must_be_rent_exempt(world):
    world.ledger.set_balance(ESCROW, world.record_rent - 1)
    res = world.init()
    assert res.error_code == "NOT_RENT_EXEMPT"
    assert res.error["number"] == 1


def test_record_slot_must_have_record_size(world):
    slot = b"\x34" * 32
    world.ledger.create_account(slot, size=73, balance=world.record_rent)
    assert world.init(escrow=slot).error_code == "INVALID_ACCOUNT_DATA"


def test_fee_recipient_must_match(world):
    before = world.snapshot()
    res = world.init(fee_recipient=STRANGER)
    assert res.error_code == "INVALID_SALES_TAX_RECIPIENT"
    assert res.error["number"] == 4
    assert world.snapshot() == before
    assert world.balance(STRANGER) == 0


def test_listing_fee_needs_funds(world):
    world.ledger.set_balance(ALICE, LISTING_FEE - 1)
    res = world.init()
    assert res.error_code == "INSUFFICIENT_FUNDS"
    assert not world.record().is_initialized()
    assert world.ledger.get_token_account(HELD).owner == ALICE


def test_double_init_is_refused(listed):
    before = listed.snapshot()
    res = listed.init(price=5)
    assert res.error_code == "ACCOUNT_ALREADY_INITIALIZED"
    assert listed.snapshot() == before
    assert listed.record().expected_amount == PRICE
