"""
escrow.runtime — the exchange engine and the pieces it is built from.

Submodules (thin overview)
--------------------------
- system     : identity helpers and well-known default identities
- authority  : delegated authority derivation and authorizations
- fees       : sales tax, royalty fan-out, seller proceeds
- processor  : ExchangeEngine (InitEscrow / Exchange handlers)
- executor   : apply_instruction (transaction, results, metrics)

Re-exports
----------
    from escrow.runtime import ExchangeEngine, apply_instruction

These are lazily loaded; importing this package does not import the engine until
the attributes are first accessed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

__all__ = (
    "system",
    "authority",
    "fees",
    "processor",
    "executor",
)

_EXPORTS: Dict[str, Tuple[str, str]] = {
    "ExchangeEngine": ("processor", "ExchangeEngine"),
    "apply_instruction": ("executor", "apply_instruction"),
    "DelegatedAuthority": ("authority", "DelegatedAuthority"),
    "plan_settlement": ("fees", "plan_settlement"),
}


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    if name in __all__:
        return import_module(f".{name}", __name__)
    target = _EXPORTS.get(name)
    if target:
        mod, attr = target
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(__all__) + list(_EXPORTS))
