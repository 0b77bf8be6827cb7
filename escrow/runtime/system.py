"""
escrow.runtime.system — identity helpers and well-known system identities.

Provides:
- The canonical identity size (32 bytes) used for accounts, mints and programs.
- Deterministic, domain-tagged default identities for the fee recipient, the escrow
  program (salt of the delegated authority) and the metadata program.
- Helpers to parse/validate identities and render them for logs.

Notes
-----
* Identities here are raw bytes. Higher layers may present other encodings for UX;
  the engine and the ledger operate on bytes of fixed length.
* Defaults are derived from a domain-tagged SHA3-256 so different deployments can
  override them via configuration without colliding with each other.
"""

from __future__ import annotations

import hashlib
from typing import Union

IDENTITY_SIZE: int = 32

ZERO_IDENTITY: bytes = b"\x00" * IDENTITY_SIZE


def _sha3_256(data: bytes) -> bytes:
    return hashlib.sha3_256(data).digest()


def derive_system_identity(tag: str) -> bytes:
    """
    Deterministically derive a system identity from a tag.
    """
    return _sha3_256(f"escrow/{tag}/v1".encode("utf-8"))


DEFAULT_FEE_RECIPIENT: bytes = derive_system_identity("fee_recipient")
DEFAULT_PROGRAM_ID: bytes = derive_system_identity("program")
DEFAULT_METADATA_PROGRAM_ID: bytes = derive_system_identity("metadata_program")


def ensure_identity(value: bytes, *, name: str = "identity") -> bytes:
    """
    Validate that `value` is exactly IDENTITY_SIZE bytes long.
    """
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")
    b = bytes(value)
    if len(b) != IDENTITY_SIZE:
        raise ValueError(f"{name} must be {IDENTITY_SIZE} bytes, got {len(b)}")
    return b


def parse_hex_identity(
    value: Union[str, bytes, bytearray], *, name: str = "identity"
) -> bytes:
    """
    Parse an identity from hex (with or without '0x' prefix) or pass-through bytes.
    """
    if isinstance(value, (bytes, bytearray)):
        return ensure_identity(value, name=name)
    if not isinstance(value, str):
        raise TypeError(f"{name} must be hex str or bytes, got {type(value).__name__}")
    s = value.lower().strip()
    if s.startswith("0x"):
        s = s[2:]
    try:
        b = bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"{name}: invalid hex string") from e
    return ensure_identity(b, name=name)


def to_hex(identity: bytes) -> str:
    """
    Hex-encode a raw identity for logging/debug (0x-prefixed).
    """
    return "0x" + bytes(identity).hex()


def short_hex(identity: bytes, n: int = 8) -> str:
    """Abbreviated hex form for log lines: '0x1234abcd…'."""
    h = bytes(identity).hex()
    return "0x" + (h if len(h) <= n else h[:n] + "…")


__all__ = [
    "IDENTITY_SIZE",
    "ZERO_IDENTITY",
    "DEFAULT_FEE_RECIPIENT",
    "DEFAULT_PROGRAM_ID",
    "DEFAULT_METADATA_PROGRAM_ID",
    "derive_system_identity",
    "ensure_identity",
    "parse_hex_identity",
    "to_hex",
    "short_hex",
]
