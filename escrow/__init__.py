"""
Single-edition escrow engine — escrow records, delegated authority, fee/royalty
settlement and the InitEscrow / Exchange instruction handlers.

This package exposes only lightweight metadata at import time. The engine and the
in-memory ledger should be imported explicitly from their subpackages:

    from escrow.runtime.processor import ExchangeEngine
    from escrow.adapters.memory import InMemoryLedger
"""

from .version import __version__

__all__ = ["__version__"]
