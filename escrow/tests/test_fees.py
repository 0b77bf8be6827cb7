import pytest

from escrow.config import FeeSchedule
from escrow.errors import CreatorMismatch, InvalidFinalAmount, InvalidRoyaltyFee
from escrow.runtime.fees import (
    check_creators,
    creator_payouts,
    plan_settlement,
    royalty_total,
    sales_tax,
)
from escrow.types.metadata import Creator, Metadata

FEE = b"\xfe" * 32
A = b"\xc1" * 32
B = b"\xc2" * 32

FEES = FeeSchedule(fee_recipient=FEE, listing_fee=0, sales_tax_bps=250)


def test_sales_tax_floors():
    assert sales_tax(1_000, 250) == 25
    assert sales_tax(999, 250) == 24
    assert sales_tax(39, 250) == 0


def test_no_metadata_pays_tax_and_seller_only():
    plan = plan_settlement(1_000, FEES, None)
    assert (plan.tax, plan.royalty_total, plan.final_amount) == (25, 0, 975)
    assert plan.payouts == ()


def test_no_metadata_ignores_supplied_creator_accounts():
    plan = plan_settlement(1_000, FEES, None, [A, B])
    assert plan.payouts == ()
    assert plan.final_amount == 975


def test_single_creator_gets_whole_royalty():
    md = Metadata(seller_fee_bps=500, creators=(Creator(A, 100),))
    plan = plan_settlement(1_000, FEES, md, [A])
    assert plan.tax == 25
    assert plan.payouts == ((A, 50),)
    assert plan.final_amount == 925


def test_rounding_dust_is_not_redistributed():
    md = Metadata(seller_fee_bps=500, creators=(Creator(A, 33), Creator(B, 67)))
    plan = plan_settlement(999, FEES, md, [A, B])
    assert plan.tax == 24
    assert plan.royalty_total == 49
    assert plan.payouts == ((A, 16), (B, 32))
    assert plan.royalty_paid == 48
    assert plan.final_amount == 999 - 24 - 49
    assert plan.tax + plan.royalty_total + plan.final_amount == plan.price


def test_creatorless_metadata_still_charges_royalty():
    md = Metadata(seller_fee_bps=1_000, creators=())
    plan = plan_settlement(1_000, FEES, md, [])
    assert plan.royalty_total == 100
    assert plan.payouts == ()
    assert plan.final_amount == 875
    assert plan.value_breakdown() == {"sales_tax": 25, "royalty": 0, "payment": 875}


def test_metadata_without_creator_list_ignores_supplied_accounts():
    md = Metadata(seller_fee_bps=500, creators=None)
    plan = plan_settlement(1_000, FEES, md, [A])
    assert plan.royalty_total == 50
    assert plan.payouts == ()
    assert plan.final_amount == 925


def test_empty_creator_list_still_checks_supplied_accounts():
    md = Metadata(seller_fee_bps=500, creators=())
    with pytest.raises(CreatorMismatch) as ei:
        plan_settlement(1_000, FEES, md, [A])
    assert ei.value.data == {"expected": 0, "actual": 1}


def test_royalty_can_leave_seller_with_nothing():
    md = Metadata(seller_fee_bps=9_750, creators=(Creator(A, 100),))
    with pytest.raises(InvalidFinalAmount) as ei:
        plan_settlement(1_000, FEES, md, [A])
    assert ei.value.data["final_amount"] == 0
    assert ei.value.data["royalties"] == 975


def test_royalty_plus_tax_above_hundred_percent():
    md = Metadata(seller_fee_bps=9_751, creators=(Creator(A, 100),))
    with pytest.raises(InvalidRoyaltyFee) as ei:
        plan_settlement(1_000, FEES, md, [A])
    assert ei.value.number == 11


def test_royalty_plus_tax_exactly_hundred_percent_is_allowed_if_seller_gets_paid():
    md = Metadata(seller_fee_bps=9_750, creators=(Creator(A, 100),))
    plan = plan_settlement(10, FEES, md, [A])
    assert (plan.tax, plan.royalty_total, plan.final_amount) == (0, 9, 1)


@pytest.mark.parametrize("price,bps", [(0, 250), (1_000, 10_000)])
def test_non_positive_final_amount(price, bps):
    fees = FeeSchedule(fee_recipient=FEE, listing_fee=0, sales_tax_bps=bps)
    with pytest.raises(InvalidFinalAmount) as ei:
        plan_settlement(price, fees, None)
    assert ei.value.number == 10


def test_creator_count_mismatch():
    creators = (Creator(A, 50), Creator(B, 50))
    with pytest.raises(CreatorMismatch):
        check_creators(creators, [A])
    with pytest.raises(CreatorMismatch):
        check_creators(creators, [A, B, A])


def test_creator_order_matters():
    creators = (Creator(A, 50), Creator(B, 50))
    check_creators(creators, [A, B])
    with pytest.raises(CreatorMismatch) as ei:
        check_creators(creators, [B, A])
    assert ei.value.data["index"] == 0


def test_royalty_and_payout_helpers():
    assert royalty_total(1_000, 500) == 50
    assert creator_payouts(50, [Creator(A, 60), Creator(B, 40)]) == ((A, 30), (B, 20))
