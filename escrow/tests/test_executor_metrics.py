from escrow import metrics
from escrow.runtime.executor import instruction_name
from escrow.types.instruction import Exchange, InitEscrow, pack

from ._world import World


def _sample(name, labels):
    return metrics.get_registry().get_sample_value(name, labels) or 0.0


def test_instruction_name_from_tag():
    assert instruction_name(pack(InitEscrow(1))) == "init_escrow"
    assert instruction_name(pack(Exchange(1))) == "exchange"
    assert instruction_name(b"") is None
    assert instruction_name(b"\x09") is None


def test_results_and_value_are_counted():
    ok_init = {"instruction": "init_escrow", "result": "success"}
    failed_ex = {"instruction": "exchange", "result": "failed"}
    before = {
        "init": _sample("escrow_instructions_total", ok_init),
        "failed": _sample("escrow_instructions_total", failed_ex),
        "tax": _sample("escrow_value_moved_total", {"kind": "sales_tax"}),
        "listing": _sample("escrow_value_moved_total", {"kind": "listing_fee"}),
    }

    w = World()
    assert w.init().is_success
    assert not w.exchange(amount=5).is_success
    assert w.exchange().is_success

    assert _sample("escrow_instructions_total", ok_init) == before["init"] + 1
    assert _sample("escrow_instructions_total", failed_ex) == before["failed"] + 1
    assert _sample("escrow_value_moved_total", {"kind": "sales_tax"}) == before["tax"] + 25
    assert _sample("escrow_value_moved_total", {"kind": "listing_fee"}) == before["listing"] + 10_000_000


def test_result_serializes(listed):
    res = listed.exchange(amount=5)
    d = res.to_dict()
    assert d["status"] == "failed"
    assert d["error"]["code"] == "EXPECTED_AMOUNT_MISMATCH"
    assert d["events"] == []

    ok = listed.exchange().to_dict()
    assert ok["status"] == "success"
    assert ok["events"][0]["kind"] == "native_transfer"


def test_exposition_text_mentions_metrics():
    text = metrics.generate_latest_text().decode()
    assert "escrow_instructions_total" in text
