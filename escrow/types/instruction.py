"""
escrow.types.instruction — wire codec for the two escrow instructions.

Layout: one leading tag byte, then an 8-byte little-endian unsigned amount.

    | tag | instruction | payload                                   |
    |-----|-------------|-------------------------------------------|
    |  0  | InitEscrow  | amount: u64 (agreed price)                |
    |  1  | Exchange    | amount: u64 (taker's expected held amount)|

Any other tag, an empty buffer, or fewer than 8 payload bytes decodes to
InvalidInstruction. Bytes after the amount are ignored.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

from ..errors import InvalidInstruction

_AMOUNT = struct.Struct("<Q")


class InstructionTag(IntEnum):
    INIT_ESCROW = 0
    EXCHANGE = 1


@dataclass(frozen=True)
class InitEscrow:
    """Create an escrow for the held unit at `amount` native units."""
    amount: int

    tag = InstructionTag.INIT_ESCROW
    name = "init_escrow"


@dataclass(frozen=True)
class Exchange:
    """Settle (or cancel) an escrow; `amount` must equal the held unit balance."""
    amount: int

    tag = InstructionTag.EXCHANGE
    name = "exchange"


EscrowInstruction = Union[InitEscrow, Exchange]


def unpack(data: bytes) -> EscrowInstruction:
    """
    Decode instruction bytes.

    Raises:
        InvalidInstruction on an unknown tag or a truncated amount.
    """
    if not data:
        raise InvalidInstruction("empty instruction data")
    tag, rest = data[0], bytes(data[1:])
    if len(rest) < _AMOUNT.size:
        raise InvalidInstruction("truncated amount", data={"tag": tag, "payload_len": len(rest)})
    (amount,) = _AMOUNT.unpack_from(rest)
    if tag == InstructionTag.INIT_ESCROW:
        return InitEscrow(amount=amount)
    if tag == InstructionTag.EXCHANGE:
        return Exchange(amount=amount)
    raise InvalidInstruction(f"unknown instruction tag {tag}", data={"tag": tag})


def pack(instruction: EscrowInstruction) -> bytes:
    """Encode an instruction to its wire form."""
    return bytes([int(instruction.tag)]) + _AMOUNT.pack(instruction.amount)


__all__ = [
    "InstructionTag",
    "InitEscrow",
    "Exchange",
    "EscrowInstruction",
    "unpack",
    "pack",
]
