"""
escrow.errors — typed failures raised by the escrow engine and its collaborators.

The engine communicates failures via *typed exceptions* that the executor converts
into failed InstructionResults. Every error carries a stable machine `code`; the
protocol-specific ones additionally carry a stable numeric `number` so callers can
match on either form.

Hierarchy
---------
EscrowError (base)
 ├─ ProtocolError                 : escrow-specific failures (numbered 0..12)
 │   ├─ InvalidInstruction        0  unknown tag or truncated payload
 │   ├─ NotRentExempt             1  record slot underfunded for persistence
 │   ├─ ExpectedAmountMismatch    2  taker's expected amount != held balance
 │   ├─ AmountOverflow            3  balance-return addition overflowed u64
 │   ├─ InvalidSalesTaxRecipient  4  fee recipient identity mismatch
 │   ├─ NumericConversionFailed   5  metadata number out of range
 │   ├─ InvalidMintAccount        6  held account mint != supplied mint
 │   ├─ InvalidTokenAmount        7  held amount != one whole unit
 │   ├─ InvalidMetadata           8  metadata undecodable or inconsistent
 │   ├─ MissingMetadata           9  no metadata stored for the mint
 │   ├─ InvalidFinalAmount       10  seller proceeds would be <= 0
 │   ├─ InvalidRoyaltyFee        11  royalty + sales tax above 100%
 │   └─ CreatorMismatch          12  creator payout accounts != metadata creators
 └─ LedgerError                   : generic account/ledger failures (no number)
     ├─ MissingRequiredSignature
     ├─ AccountAlreadyInitialized
     ├─ UninitializedAccount
     ├─ InvalidAccountData
     ├─ NotEnoughAccountKeys
     ├─ AccountNotFound
     ├─ InsufficientFunds
     └─ AuthorityMismatch

Notes
-----
* Every failure aborts the whole invocation; the enclosing ledger transaction
  restores state. Metadata absence/undecodable metadata is the one condition the
  engine recovers from, and it does so through MetadataOutcome rather than by
  catching these exceptions.
* This module imports nothing from the rest of the package so it can be used from
  low-level codecs without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EscrowError(Exception):
    """
    Base escrow error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_INSTRUCTION').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "escrow error"
    code: str = "ESCROW_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    @property
    def number(self) -> Optional[int]:
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for results/logs/CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.number is not None:
            out["number"] = self.number
        if self.data is not None:
            out["data"] = self.data
        return out


class _CodedError(EscrowError):
    CODE = "ESCROW_ERROR"
    MESSAGE = "escrow error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        data: Optional[Dict[str, Any]] = None,
        **details: Any,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        for k, v in details.items():
            if v is not None:
                d.setdefault(k, v)
        super().__init__(message=message or self.MESSAGE, code=self.CODE, data=d or None)


# -------- protocol errors ---------------------------------------------------


class ProtocolError(_CodedError):
    """Escrow-specific failure with a stable custom number."""
    NUMBER = -1

    @property
    def number(self) -> Optional[int]:
        return self.NUMBER


class InvalidInstruction(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_INSTRUCTION", 0, "invalid instruction"


class NotRentExempt(ProtocolError):
    CODE, NUMBER, MESSAGE = "NOT_RENT_EXEMPT", 1, "not rent exempt"


class ExpectedAmountMismatch(ProtocolError):
    CODE, NUMBER, MESSAGE = "EXPECTED_AMOUNT_MISMATCH", 2, "expected amount mismatch"


class AmountOverflow(ProtocolError):
    CODE, NUMBER, MESSAGE = "AMOUNT_OVERFLOW", 3, "amount overflow"


class InvalidSalesTaxRecipient(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_SALES_TAX_RECIPIENT", 4, "invalid sales tax recipient"


class NumericConversionFailed(ProtocolError):
    CODE, NUMBER, MESSAGE = "NUMERIC_CONVERSION_FAILED", 5, "numeric conversion failed"


class InvalidMintAccount(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_MINT_ACCOUNT", 6, "invalid mint account"


class InvalidTokenAmount(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_TOKEN_AMOUNT", 7, "invalid token amount (needs to be exactly 1)"


class InvalidMetadata(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_METADATA", 8, "invalid metadata"


class MissingMetadata(ProtocolError):
    CODE, NUMBER, MESSAGE = "MISSING_METADATA", 9, "missing metadata"


class InvalidFinalAmount(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_FINAL_AMOUNT", 10, "invalid final amount"


class InvalidRoyaltyFee(ProtocolError):
    CODE, NUMBER, MESSAGE = "INVALID_ROYALTY_FEE", 11, "royalty percentage too high"


class CreatorMismatch(ProtocolError):
    CODE, NUMBER, MESSAGE = "CREATOR_MISMATCH", 12, "creator mismatch"


# -------- generic ledger errors ---------------------------------------------


class LedgerError(_CodedError):
    """Generic account/ledger failure (signatures, account shapes, balances)."""


class MissingRequiredSignature(LedgerError):
    CODE, MESSAGE = "MISSING_REQUIRED_SIGNATURE", "missing required signature"


class AccountAlreadyInitialized(LedgerError):
    CODE, MESSAGE = "ACCOUNT_ALREADY_INITIALIZED", "account already initialized"


class UninitializedAccount(LedgerError):
    CODE, MESSAGE = "UNINITIALIZED_ACCOUNT", "account not initialized"


class InvalidAccountData(LedgerError):
    CODE, MESSAGE = "INVALID_ACCOUNT_DATA", "invalid account data"


class NotEnoughAccountKeys(LedgerError):
    CODE, MESSAGE = "NOT_ENOUGH_ACCOUNT_KEYS", "not enough account keys"


class AccountNotFound(LedgerError):
    CODE, MESSAGE = "ACCOUNT_NOT_FOUND", "account not found"


class InsufficientFunds(LedgerError):
    CODE, MESSAGE = "INSUFFICIENT_FUNDS", "insufficient funds"


class AuthorityMismatch(LedgerError):
    CODE, MESSAGE = "AUTHORITY_MISMATCH", "authority does not control the account"


# -------- helper utilities ---------------------------------------------------


def error_to_result_fields(err: EscrowError) -> Dict[str, Any]:
    """
    Map an EscrowError to canonical result fields.

    Returns:
        {
          "status": "failed",
          "error":  {code, message, number?, data?}
        }
    """
    return {"status": "failed", "error": err.to_dict()}


__all__ = [
    "EscrowError",
    "ProtocolError",
    "LedgerError",
    "InvalidInstruction",
    "NotRentExempt",
    "ExpectedAmountMismatch",
    "AmountOverflow",
    "InvalidSalesTaxRecipient",
    "NumericConversionFailed",
    "InvalidMintAccount",
    "InvalidTokenAmount",
    "InvalidMetadata",
    "MissingMetadata",
    "InvalidFinalAmount",
    "InvalidRoyaltyFee",
    "CreatorMismatch",
    "MissingRequiredSignature",
    "AccountAlreadyInitialized",
    "UninitializedAccount",
    "InvalidAccountData",
    "NotEnoughAccountKeys",
    "AccountNotFound",
    "InsufficientFunds",
    "AuthorityMismatch",
    "error_to_result_fields",
]
