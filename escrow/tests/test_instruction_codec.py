import struct

import pytest

from escrow.errors import InvalidInstruction
from escrow.types.instruction import Exchange, InitEscrow, InstructionTag, pack, unpack


def test_init_escrow_layout():
    data = bytes([0]) + struct.pack("<Q", 1_000)
    assert unpack(data) == InitEscrow(amount=1_000)
    assert pack(InitEscrow(1_000)) == data


def test_exchange_layout():
    data = bytes([1]) + (2**64 - 1).to_bytes(8, "little")
    ix = unpack(data)
    assert isinstance(ix, Exchange)
    assert ix.amount == 2**64 - 1
    assert ix.tag is InstructionTag.EXCHANGE


def test_trailing_bytes_are_ignored():
    assert unpack(pack(Exchange(7)) + b"\xff\xff") == Exchange(7)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x00",
        b"\x01" + b"\x00" * 7,
        b"\x02" + b"\x00" * 8,
        b"\xff" + b"\x01" * 8,
    ],
)
def test_malformed_instructions_are_rejected(data):
    with pytest.raises(InvalidInstruction) as ei:
        unpack(data)
    assert ei.value.number == 0
    assert ei.value.code == "INVALID_INSTRUCTION"
