"""
escrow.types — value types shared by the engine, the collaborators and the CLI.

Submodules:
- instruction : InitEscrow / Exchange and their tag+u64 wire codec
- record      : EscrowRecord and its fixed-length layout
- accounts    : AccountMeta, TokenAccount, Mint
- metadata    : Metadata, Creator, MetadataOutcome
- events      : LedgerEvent journal entries
- result      : Status, InstructionResult
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict

_exports: Dict[str, str] = {
    "InitEscrow": "instruction",
    "Exchange": "instruction",
    "EscrowRecord": "record",
    "RECORD_LEN": "record",
    "AccountMeta": "accounts",
    "TokenAccount": "accounts",
    "Mint": "accounts",
    "Creator": "metadata",
    "Metadata": "metadata",
    "MetadataOutcome": "metadata",
    "LedgerEvent": "events",
    "Status": "result",
    "InstructionResult": "result",
}

__all__ = tuple(_exports)


def __getattr__(name: str) -> Any:
    if name in _exports:
        return getattr(import_module(f".{_exports[name]}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
