"""
escrow.types.result — status enum and InstructionResult container.

`InstructionResult` is the canonical return object of the executor when applying a
single instruction inside a ledger transaction. It is frozen, JSON-friendly, and
carries the ledger events the instruction produced (empty on failure, since the
transaction was rolled back).

String forms:
  - str(Status.SUCCESS) -> "success"   (good for logs/metrics)
  - Status.SUCCESS.code -> "SUCCESS"   (good for protocols)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .events import LedgerEvent


class Status(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def code(self) -> str:
        return self.value.upper()

    @property
    def is_success(self) -> bool:
        return self is Status.SUCCESS

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


@dataclass(frozen=True)
class InstructionResult:
    status: Status
    instruction: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    events: Tuple[LedgerEvent, ...] = ()

    @classmethod
    def success(cls, instruction: str, events: Iterable[LedgerEvent]) -> "InstructionResult":
        return cls(status=Status.SUCCESS, instruction=instruction, events=tuple(events))

    @classmethod
    def failure(cls, instruction: Optional[str], error: Dict[str, Any]) -> "InstructionResult":
        return cls(status=Status.FAILED, instruction=instruction, error=error)

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    @property
    def error_code(self) -> Optional[str]:
        return None if self.error is None else self.error.get("code")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": str(self.status),
            "instruction": self.instruction,
            "error": self.error,
            "events": [ev.to_dict() for ev in self.events],
        }

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return (
            f"InstructionResult(status={self.status.code}, instruction={self.instruction}, "
            f"error={self.error_code}, events={len(self.events)})"
        )


__all__ = ["Status", "InstructionResult"]
