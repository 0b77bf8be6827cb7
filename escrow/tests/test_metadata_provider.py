import cbor2
import pytest

from escrow.adapters.metadata import CborMetadataProvider
from escrow.runtime.system import DEFAULT_METADATA_PROGRAM_ID
from escrow.types.metadata import Creator, Metadata

A = b"\xc1" * 32
B = b"\xc2" * 32
MINT = b"\x11" * 32

provider = CborMetadataProvider(DEFAULT_METADATA_PROGRAM_ID)


def _raw(bps, creators):
    return cbor2.dumps({"seller_fee_bps": bps, "creators": creators})


def test_address_is_deterministic_and_namespaced():
    addr = provider.derive_address(MINT)
    assert addr == provider.derive_address(MINT)
    assert len(addr) == 32
    assert addr != provider.derive_address(b"\x12" * 32)
    assert addr != CborMetadataProvider(b"\x00" * 32).derive_address(MINT)


def test_encode_then_parse():
    md = Metadata(seller_fee_bps=500, creators=(Creator(A, 60), Creator(B, 40)))
    outcome = provider.parse(CborMetadataProvider.encode(md))
    assert outcome.is_ok
    assert outcome.metadata == md


def test_null_creators_parse_as_no_creator_list():
    md = Metadata(seller_fee_bps=300)
    outcome = provider.parse(CborMetadataProvider.encode(md))
    assert outcome.is_ok
    assert outcome.metadata.creators is None
    assert outcome.metadata.creator_addresses() == ()


def test_empty_creator_list_is_kept_distinct_from_null():
    outcome = provider.parse(_raw(300, []))
    assert outcome.is_ok
    assert outcome.metadata.creators == ()


@pytest.mark.parametrize("data", [b"", bytes(64)])
def test_absent_metadata_is_recoverable(data):
    outcome = provider.parse(data)
    assert not outcome.is_ok
    assert outcome.recoverable
    assert outcome.error.code == "MISSING_METADATA"


@pytest.mark.parametrize(
    "data",
    [
        b"\xff\xfe\xfd",
        cbor2.dumps([1, 2, 3]),
        cbor2.dumps({"creators": []}),
        _raw("500", []),
        _raw(500, [[A]]),
        _raw(500, [[b"\x01" * 31, 100]]),
        _raw(500, {"a": 1}),
    ],
)
def test_undecodable_metadata_is_recoverable(data):
    outcome = provider.parse(data)
    assert outcome.recoverable
    assert outcome.error.code == "INVALID_METADATA"


@pytest.mark.parametrize(
    "data",
    [
        _raw(70_000, [[A, 100]]),
        _raw(-1, [[A, 100]]),
        _raw(500, [[A, 300]]),
    ],
)
def test_out_of_range_numbers_are_fatal(data):
    outcome = provider.parse(data)
    assert not outcome.recoverable
    assert outcome.error.code == "NUMERIC_CONVERSION_FAILED"
    assert outcome.error.number == 5


def test_shares_must_sum_to_hundred():
    outcome = provider.parse(_raw(500, [[A, 50], [B, 40]]))
    assert not outcome.recoverable
    assert outcome.error.code == "INVALID_METADATA"
    assert outcome.error.data["total"] == 90
