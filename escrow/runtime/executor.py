"""
escrow.runtime.executor — apply one instruction atomically and report the outcome.

`apply_instruction` is the boundary between typed engine failures and results:

- opens `ledger.transaction(signers)` with the signer flags of the supplied
  accounts, so every collaborator call of the invocation commits or rolls back
  together;
- converts an EscrowError into a failed InstructionResult (state untouched);
- records instruction/value metrics.

Anything that is not an EscrowError is a bug and propagates after rollback.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .. import metrics
from ..errors import EscrowError
from ..types.accounts import AccountMeta
from ..types.instruction import InstructionTag
from ..types.result import InstructionResult
from .processor import ExchangeEngine

log = logging.getLogger(__name__)

_NAMES = {
    InstructionTag.INIT_ESCROW: "init_escrow",
    InstructionTag.EXCHANGE: "exchange",
}


def instruction_name(data: bytes) -> Optional[str]:
    """Name of the instruction `data` encodes, judged by its tag byte alone."""
    if not data:
        return None
    try:
        return _NAMES[InstructionTag(data[0])]
    except ValueError:
        return None


def apply_instruction(
    engine: ExchangeEngine,
    ledger,
    data: bytes,
    accounts: Sequence[AccountMeta],
) -> InstructionResult:
    """
    Apply a single escrow instruction against `ledger`.

    Args:
        engine: engine wired to `ledger`'s collaborators.
        ledger: object exposing `transaction(signers)` (e.g. InMemoryLedger).
        data: instruction bytes.
        accounts: positional accounts with signer flags.

    Returns:
        InstructionResult with the committed events on success, or the error
        dict on failure.
    """
    name = instruction_name(data)
    signers = [a.key for a in accounts if a.is_signer]
    with metrics.time_instruction(name):
        try:
            with ledger.transaction(signers) as tx:
                processed = engine.process(data, accounts)
        except EscrowError as e:
            log.info("instruction %s failed: %s", name or "?", e)
            metrics.observe_instruction(instruction=name, result="failed")
            return InstructionResult.failure(name, e.to_dict())

    metrics.observe_instruction(instruction=processed.instruction, result="success")
    for kind, amount in processed.values.items():
        metrics.observe_value(kind, amount)
    return InstructionResult.success(processed.instruction, tx.events)


__all__ = ["apply_instruction", "instruction_name"]
