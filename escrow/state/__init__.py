"""escrow.state — persistence of escrow records inside account data."""

from .records import EscrowRecordStore

__all__ = ["EscrowRecordStore"]
