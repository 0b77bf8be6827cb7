"""
escrow.runtime.fees — sales tax, royalty fan-out and seller proceeds.

This module turns an escrow price into the list of native-value payments a paid
settlement makes:

- Tax:      floor(price * sales_tax_bps / 10_000) to the fee recipient.
- Royalty:  floor(seller_fee_bps * price / 10_000) in total, fanned out to the
            metadata creators in metadata order, floor(share * royalty / 100) each.
- Final:    price - tax - royalty to the seller; must be strictly positive.

All arithmetic is integer floor division. Rounding dust is never redistributed:
whatever the per-creator floors leave behind stays with the taker, and whatever the
tax/royalty floors leave behind stays with the seller through the final-amount
subtraction.

`plan_settlement` performs every check up front so the engine can validate the
whole payment before the first transfer is issued.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from ..config import BPS_DENOM, FeeSchedule
from ..errors import CreatorMismatch, InvalidFinalAmount, InvalidRoyaltyFee
from ..types.metadata import Creator, Metadata

PERCENT_DENOM = 100


@dataclass(frozen=True)
class SettlementPlan:
    """
    Amounts of a paid settlement. Invariant: tax + royalty_total + final_amount == price.
    Creator payouts sum to at most royalty_total.
    """
    price: int
    tax: int
    royalty_total: int
    payouts: Tuple[Tuple[bytes, int], ...]
    final_amount: int

    @property
    def royalty_paid(self) -> int:
        return sum(amount for _, amount in self.payouts)

    def value_breakdown(self) -> Dict[str, int]:
        return {
            "sales_tax": self.tax,
            "royalty": self.royalty_paid,
            "payment": self.final_amount,
        }


def sales_tax(price: int, sales_tax_bps: int) -> int:
    return (price * sales_tax_bps) // BPS_DENOM


def royalty_total(price: int, seller_fee_bps: int) -> int:
    return (seller_fee_bps * price) // BPS_DENOM


def creator_payouts(total: int, creators: Sequence[Creator]) -> Tuple[Tuple[bytes, int], ...]:
    return tuple((c.address, (c.share * total) // PERCENT_DENOM) for c in creators)


def check_creators(creators: Sequence[Creator], supplied: Sequence[bytes]) -> None:
    """
    Require the supplied payout accounts to match the metadata creators exactly,
    same count and same order. Length is checked before any positional access.
    """
    if len(creators) != len(supplied):
        raise CreatorMismatch(
            "number of creators in metadata doesn't match number of creators passed",
            expected=len(creators),
            actual=len(supplied),
        )
    for i, (creator, key) in enumerate(zip(creators, supplied)):
        if creator.address != key:
            raise CreatorMismatch(
                "creator in metadata doesn't match creator passed",
                index=i,
                expected="0x" + creator.address.hex(),
                actual="0x" + bytes(key).hex(),
            )


def plan_settlement(
    price: int,
    fees: FeeSchedule,
    metadata: Optional[Metadata],
    creator_accounts: Sequence[bytes] = (),
) -> SettlementPlan:
    """
    Compute and validate a paid settlement.

    Args:
        price: escrow price (the record's expected_amount, not the taker's claim).
        fees: the engine's fee schedule.
        metadata: parsed metadata, or None when absent/undecodable (no royalty).
        creator_accounts: supplied creator payout identities, in order. Ignored
            when metadata is None or carries no creator list; the royalty is then
            still deducted from the seller but paid to no one.

    Raises:
        InvalidRoyaltyFee  if seller_fee_bps + sales_tax_bps > 10_000
        CreatorMismatch    if the creator accounts don't match the metadata
        InvalidFinalAmount if the seller would receive nothing
    """
    tax = sales_tax(price, fees.sales_tax_bps)

    total = 0
    payouts: Tuple[Tuple[bytes, int], ...] = ()
    if metadata is not None:
        if metadata.seller_fee_bps + fees.sales_tax_bps > BPS_DENOM:
            raise InvalidRoyaltyFee(
                seller_fee_bps=metadata.seller_fee_bps,
                sales_tax_bps=fees.sales_tax_bps,
            )
        total = royalty_total(price, metadata.seller_fee_bps)
        if metadata.creators is not None:
            check_creators(metadata.creators, creator_accounts)
            payouts = creator_payouts(total, metadata.creators)

    final_amount = price - tax - total
    if final_amount <= 0:
        raise InvalidFinalAmount(
            "final amount is non-positive",
            final_amount=final_amount,
            tax=tax,
            royalties=total,
        )
    return SettlementPlan(
        price=price,
        tax=tax,
        royalty_total=total,
        payouts=payouts,
        final_amount=final_amount,
    )


__all__ = [
    "PERCENT_DENOM",
    "SettlementPlan",
    "sales_tax",
    "royalty_total",
    "creator_payouts",
    "check_creators",
    "plan_settlement",
]
