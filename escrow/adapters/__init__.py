"""
escrow.adapters — collaborator protocols and reference implementations.

- interfaces : typing.Protocol definitions consumed by the engine
- memory     : InMemoryLedger (accounts, native & asset transfers, transactions)
- rent       : RentPolicy minimum-balance rule
- metadata   : CborMetadataProvider (address derivation + CBOR parsing)
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict

_exports: Dict[str, str] = {
    "InMemoryLedger": "memory",
    "RentPolicy": "rent",
    "CborMetadataProvider": "metadata",
}

__all__ = tuple(_exports)


def __getattr__(name: str) -> Any:
    if name in _exports:
        return getattr(import_module(f".{_exports[name]}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
