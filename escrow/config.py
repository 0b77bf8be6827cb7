"""
escrow.config — immutable fee schedule and engine configuration.

This module centralizes the fixed values the exchange engine is constructed with:
  • Fee schedule (fee recipient identity, flat listing fee, sales-tax rate in bps)
  • Delegated-authority seed and the program identity used as its salt
  • Metadata program identity (namespace for metadata address derivation)

Configuration may be provided via environment variables. Defaults reproduce the
production schedule: 0.01 native units (10_000_000 base units) listing fee and a
2.5% (250 bps) sales tax.

Environment variables (all optional):
  ESCROW_FEE_RECIPIENT      -> 32-byte hex identity (default: derived system id)
  ESCROW_LISTING_FEE        -> integer base units (default: 10000000)
  ESCROW_SALES_TAX_BPS      -> integer in [0, 10000] (default: 250)
  ESCROW_AUTHORITY_SEED     -> UTF-8 seed for the delegated authority (default: escrow)
  ESCROW_PROGRAM_ID         -> 32-byte hex identity salting the authority
  ESCROW_METADATA_PROGRAM   -> 32-byte hex identity of the metadata program

Programmatic usage:
    from escrow.config import get_config
    cfg = get_config()
    engine = ExchangeEngine(cfg, ...)

Alternate schedules are built directly for tests:
    FeeSchedule(fee_recipient=..., listing_fee=0, sales_tax_bps=500)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Union

from .runtime.system import (
    DEFAULT_FEE_RECIPIENT,
    DEFAULT_METADATA_PROGRAM_ID,
    DEFAULT_PROGRAM_ID,
    parse_hex_identity,
    short_hex,
    to_hex,
)

BPS_DENOM = 10_000  # basis-points denominator (100% = 10_000)
U64_MAX = (1 << 64) - 1

DEFAULT_LISTING_FEE = 10_000_000  # 0.01 native unit
DEFAULT_SALES_TAX_BPS = 250  # 2.5%
DEFAULT_AUTHORITY_SEED = b"escrow"


# ------------------------------ dataclasses ---------------------------------


@dataclass(frozen=True)
class FeeSchedule:
    """
    Fixed fees charged by the engine.

    fee_recipient:
        The only identity allowed to receive the listing fee and the sales tax.
    listing_fee:
        Flat amount moved from the initializer at InitEscrow (0 disables it).
    sales_tax_bps:
        Proportional tax on the escrow price, charged to the taker at Exchange.
    """
    fee_recipient: bytes = DEFAULT_FEE_RECIPIENT
    listing_fee: int = DEFAULT_LISTING_FEE
    sales_tax_bps: int = DEFAULT_SALES_TAX_BPS

    def __post_init__(self) -> None:
        parse_hex_identity(self.fee_recipient, name="fee_recipient")
        if not 0 <= int(self.listing_fee) <= U64_MAX:
            raise ValueError("listing_fee must fit in u64")
        if not 0 <= int(self.sales_tax_bps) <= BPS_DENOM:
            raise ValueError(f"sales_tax_bps must be in [0, {BPS_DENOM}]")


@dataclass(frozen=True)
class EngineConfig:
    fees: FeeSchedule = field(default_factory=FeeSchedule)
    authority_seed: bytes = DEFAULT_AUTHORITY_SEED
    program_id: bytes = DEFAULT_PROGRAM_ID
    metadata_program_id: bytes = DEFAULT_METADATA_PROGRAM_ID

    def __post_init__(self) -> None:
        if not self.authority_seed or len(self.authority_seed) > 32:
            raise ValueError("authority_seed must be 1..32 bytes")
        parse_hex_identity(self.program_id, name="program_id")
        parse_hex_identity(self.metadata_program_id, name="metadata_program_id")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fee_recipient": to_hex(self.fees.fee_recipient),
            "listing_fee": self.fees.listing_fee,
            "sales_tax_bps": self.fees.sales_tax_bps,
            "authority_seed": self.authority_seed.decode("utf-8", "replace"),
            "program_id": to_hex(self.program_id),
            "metadata_program_id": to_hex(self.metadata_program_id),
        }


# ------------------------------ loader --------------------------------------


def _pick(
    overrides: Mapping[str, Any], env: Mapping[str, str], key: str, var: str
) -> Optional[Any]:
    if key in overrides:
        return overrides[key]
    return env.get(var)


def _identity(value: Optional[Union[str, bytes]], default: bytes, name: str) -> bytes:
    if value is None or value == "":
        return default
    return parse_hex_identity(value, name=name)


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Any]] = None,
) -> EngineConfig:
    """
    Build an EngineConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys support:
          'fee_recipient', 'listing_fee', 'sales_tax_bps', 'authority_seed',
          'program_id', 'metadata_program_id'

    Raises:
        ValueError on malformed values.
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    listing_fee = _pick(overrides, env, "listing_fee", "ESCROW_LISTING_FEE")
    sales_tax = _pick(overrides, env, "sales_tax_bps", "ESCROW_SALES_TAX_BPS")
    seed = _pick(overrides, env, "authority_seed", "ESCROW_AUTHORITY_SEED")
    if isinstance(seed, str):
        seed = seed.encode("utf-8")

    fees = FeeSchedule(
        fee_recipient=_identity(
            _pick(overrides, env, "fee_recipient", "ESCROW_FEE_RECIPIENT"),
            DEFAULT_FEE_RECIPIENT,
            "fee_recipient",
        ),
        listing_fee=int(listing_fee) if listing_fee not in (None, "") else DEFAULT_LISTING_FEE,
        sales_tax_bps=int(sales_tax) if sales_tax not in (None, "") else DEFAULT_SALES_TAX_BPS,
    )
    return EngineConfig(
        fees=fees,
        authority_seed=seed or DEFAULT_AUTHORITY_SEED,
        program_id=_identity(
            _pick(overrides, env, "program_id", "ESCROW_PROGRAM_ID"),
            DEFAULT_PROGRAM_ID,
            "program_id",
        ),
        metadata_program_id=_identity(
            _pick(overrides, env, "metadata_program_id", "ESCROW_METADATA_PROGRAM"),
            DEFAULT_METADATA_PROGRAM_ID,
            "metadata_program_id",
        ),
    )


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """
    Cached global config. Suitable for application bootstraps and the CLI.
    """
    return load_config()


def summary(cfg: Optional[EngineConfig] = None) -> str:
    """
    Return a human-friendly one-line summary of the engine configuration.
    """
    cfg = cfg or get_config()
    f = cfg.fees
    return (
        "escrow{"
        f"fee_recipient={short_hex(f.fee_recipient)}, listing_fee={f.listing_fee}, "
        f"sales_tax={f.sales_tax_bps}bps, seed={cfg.authority_seed.decode('utf-8', 'replace')}, "
        f"program={short_hex(cfg.program_id)}, metadata_program={short_hex(cfg.metadata_program_id)}"
        "}"
    )


__all__ = [
    "BPS_DENOM",
    "U64_MAX",
    "DEFAULT_LISTING_FEE",
    "DEFAULT_SALES_TAX_BPS",
    "FeeSchedule",
    "EngineConfig",
    "load_config",
    "get_config",
    "summary",
]
