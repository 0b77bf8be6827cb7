import json

from typer.testing import CliRunner

from escrow.cli import app
from escrow.config import get_config
from escrow.runtime.authority import DelegatedAuthority
from escrow.types.record import EscrowRecord

runner = CliRunner()


def test_decode_ix():
    r = runner.invoke(app, ["decode-ix", "00e803000000000000", "--json"])
    assert r.exit_code == 0, r.output
    assert json.loads(r.stdout) == {"instruction": "init_escrow", "tag": 0, "amount": 1000}


def test_decode_ix_rejects_bad_tag():
    r = runner.invoke(app, ["decode-ix", "0x05e803000000000000", "--json"])
    assert r.exit_code == 1
    assert json.loads(r.stdout)["error"]["code"] == "INVALID_INSTRUCTION"


def test_decode_record():
    rec = EscrowRecord(
        initialized=True,
        initializer_identity=b"\x01" * 32,
        mint_identity=b"\x02" * 32,
        held_account_identity=b"\x03" * 32,
        expected_amount=42,
    )
    r = runner.invoke(app, ["decode-record", rec.pack().hex(), "--json"])
    assert r.exit_code == 0, r.output
    out = json.loads(r.stdout)
    assert out["initialized"] is True
    assert out["mint"] == "0x" + "02" * 32
    assert out["expected_amount"] == 42


def test_quote_with_royalty():
    r = runner.invoke(
        app, ["quote", "1000", "--royalty-bps", "500", "--share", "60", "--share", "40", "--json"]
    )
    assert r.exit_code == 0, r.output
    out = json.loads(r.stdout)
    assert out["sales_tax"] == 25
    assert out["creator_payouts"] == [30, 20]
    assert out["final_amount"] == 925


def test_quote_invalid_royalty_exits_nonzero():
    r = runner.invoke(app, ["quote", "1000", "--royalty-bps", "9900", "--share", "100", "--json"])
    assert r.exit_code == 1
    assert json.loads(r.stdout)["error"]["number"] == 11


def test_authority_matches_config():
    r = runner.invoke(app, ["authority"])
    assert r.exit_code == 0
    assert r.stdout.strip() == "0x" + DelegatedAuthority.from_config(get_config()).identity.hex()


def test_config_and_metrics_commands():
    r = runner.invoke(app, ["config"])
    assert r.exit_code == 0
    assert r.stdout.startswith("escrow{")
    r = runner.invoke(app, ["metrics"])
    assert r.exit_code == 0


def test_version():
    from escrow import __version__

    r = runner.invoke(app, ["version"])
    assert r.exit_code == 0
    assert r.stdout.strip() == f"escrow-engine {__version__}"
