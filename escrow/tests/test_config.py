import pytest

from escrow.config import (
    DEFAULT_LISTING_FEE,
    DEFAULT_SALES_TAX_BPS,
    EngineConfig,
    FeeSchedule,
    load_config,
    summary,
)
from escrow.runtime.system import DEFAULT_FEE_RECIPIENT, DEFAULT_PROGRAM_ID

FEE_HEX = "0x" + "fe" * 32


def test_defaults():
    cfg = load_config({})
    assert cfg.fees.listing_fee == DEFAULT_LISTING_FEE == 10_000_000
    assert cfg.fees.sales_tax_bps == DEFAULT_SALES_TAX_BPS == 250
    assert cfg.fees.fee_recipient == DEFAULT_FEE_RECIPIENT
    assert cfg.authority_seed == b"escrow"
    assert cfg.program_id == DEFAULT_PROGRAM_ID


def test_environment_values():
    cfg = load_config(
        {
            "ESCROW_FEE_RECIPIENT": FEE_HEX,
            "ESCROW_LISTING_FEE": "0",
            "ESCROW_SALES_TAX_BPS": "500",
            "ESCROW_AUTHORITY_SEED": "vault",
        }
    )
    assert cfg.fees.fee_recipient == b"\xfe" * 32
    assert cfg.fees.listing_fee == 0
    assert cfg.fees.sales_tax_bps == 500
    assert cfg.authority_seed == b"vault"


def test_overrides_win_over_environment():
    cfg = load_config({"ESCROW_SALES_TAX_BPS": "500"}, overrides={"sales_tax_bps": 100})
    assert cfg.fees.sales_tax_bps == 100


@pytest.mark.parametrize(
    "env",
    [
        {"ESCROW_SALES_TAX_BPS": "10001"},
        {"ESCROW_LISTING_FEE": "-1"},
        {"ESCROW_FEE_RECIPIENT": "0xabcd"},
        {"ESCROW_PROGRAM_ID": "not-hex"},
    ],
)
def test_malformed_values_are_rejected(env):
    with pytest.raises(ValueError):
        load_config(env)


def test_summary_and_to_dict(config):
    line = summary(config)
    assert "listing_fee=10000000" in line
    assert "sales_tax=250bps" in line
    d = config.to_dict()
    assert d["fee_recipient"] == FEE_HEX
    assert d["authority_seed"] == "escrow"


def test_schedule_is_frozen():
    fees = FeeSchedule()
    with pytest.raises(Exception):
        fees.listing_fee = 1  # type: ignore[misc]
    assert EngineConfig().fees == fees
