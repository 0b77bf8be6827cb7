"""
Property tests:
- a paid settlement never creates or destroys value: tax + royalty + final == price,
  creator payouts never exceed the royalty total;
- the instruction decoder either decodes or raises InvalidInstruction, nothing else;
- record decoding of arbitrary bytes only ever fails with InvalidAccountData.
"""
from __future__ import annotations

from hypothesis import assume, given, settings, strategies as st

from escrow.config import U64_MAX, FeeSchedule
from escrow.errors import EscrowError, InvalidAccountData, InvalidInstruction
from escrow.runtime.fees import plan_settlement
from escrow.types.instruction import unpack
from escrow.types.metadata import Creator, Metadata
from escrow.types.record import RECORD_LEN, EscrowRecord

FEE = b"\xfe" * 32


@st.composite
def shares(draw):
    head = draw(st.lists(st.integers(0, 100), min_size=0, max_size=4))
    assume(sum(head) <= 100)
    return head + [100 - sum(head)]


@settings(max_examples=300, deadline=None)
@given(
    price=st.integers(0, U64_MAX),
    tax_bps=st.integers(0, 10_000),
    royalty_bps=st.integers(0, 10_000),
    parts=shares(),
)
def test_settlement_conserves_value(price, tax_bps, royalty_bps, parts):
    fees = FeeSchedule(fee_recipient=FEE, listing_fee=0, sales_tax_bps=tax_bps)
    creators = tuple(Creator(bytes([i + 1]) * 32, s) for i, s in enumerate(parts))
    md = Metadata(seller_fee_bps=royalty_bps, creators=creators)
    try:
        plan = plan_settlement(price, fees, md, [c.address for c in creators])
    except EscrowError as e:
        assert e.code in {"INVALID_ROYALTY_FEE", "INVALID_FINAL_AMOUNT"}
        return
    assert plan.final_amount > 0
    assert plan.tax + plan.royalty_total + plan.final_amount == price
    assert plan.royalty_paid <= plan.royalty_total
    assert royalty_bps + tax_bps <= 10_000


@settings(max_examples=300, deadline=None)
@given(data=st.binary(max_size=16))
def test_decoder_is_total(data):
    try:
        ix = unpack(data)
    except InvalidInstruction:
        return
    assert data[0] in (0, 1)
    assert ix.amount == int.from_bytes(data[1:9], "little")


@settings(max_examples=200, deadline=None)
@given(data=st.binary(min_size=RECORD_LEN, max_size=RECORD_LEN))
def test_record_decoder_is_total(data):
    try:
        rec = EscrowRecord.unpack_unchecked(data)
    except InvalidAccountData:
        assert data[0] > 1
        return
    assert rec.pack() == data
