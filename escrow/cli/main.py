"""
escrow.cli.main
---------------

Operator tooling for the escrow engine:
- decode instruction bytes and persisted escrow records,
- quote the payment split of a settlement under the configured fee schedule,
- show the delegated-authority identity, the effective config and metrics.

Examples
--------
python -m escrow.cli decode-ix 00e803000000000000
python -m escrow.cli decode-record <210 hex chars> --json
python -m escrow.cli quote 1000 --royalty-bps 500 --share 60 --share 40
python -m escrow.cli authority --salt 0x…
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer

from .. import __version__, metrics
from ..config import get_config, summary
from ..errors import EscrowError, error_to_result_fields
from ..runtime.authority import derive
from ..runtime.fees import plan_settlement
from ..runtime.system import derive_system_identity, parse_hex_identity, to_hex
from ..types.instruction import unpack
from ..types.metadata import Creator, Metadata
from ..types.record import EscrowRecord

app = typer.Typer(
    name="escrow",
    add_completion=False,
    no_args_is_help=True,
    help="Inspect escrow instructions and records, quote settlements.",
)


def _hex_bytes(value: str) -> bytes:
    s = value.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    try:
        return bytes.fromhex(s)
    except ValueError:
        raise typer.BadParameter("expected a hex string")


def _emit(obj: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(obj, indent=2, sort_keys=True))
        return
    for k, v in obj.items():
        typer.echo(f"{k}: {v}")


def _fail(err: EscrowError, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(error_to_result_fields(err), sort_keys=True))
    else:
        typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=1)


@app.command("decode-ix")
def decode_ix(
    data: str = typer.Argument(..., help="Instruction bytes as hex."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Decode an InitEscrow / Exchange instruction."""
    try:
        ix = unpack(_hex_bytes(data))
    except EscrowError as e:
        _fail(e, as_json)
        return
    _emit({"instruction": ix.name, "tag": int(ix.tag), "amount": ix.amount}, as_json)


@app.command("decode-record")
def decode_record(
    data: str = typer.Argument(..., help="Escrow record bytes as hex."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Decode a persisted escrow record (initialized or not)."""
    try:
        rec = EscrowRecord.unpack_unchecked(_hex_bytes(data))
    except EscrowError as e:
        _fail(e, as_json)
        return
    _emit(
        {
            "initialized": rec.initialized,
            "initializer": to_hex(rec.initializer_identity),
            "mint": to_hex(rec.mint_identity),
            "held_account": to_hex(rec.held_account_identity),
            "expected_amount": rec.expected_amount,
        },
        as_json,
    )


@app.command("quote")
def quote(
    price: int = typer.Argument(..., min=0, help="Escrow price in base units."),
    royalty_bps: Optional[int] = typer.Option(
        None, "--royalty-bps", help="Seller fee in bps; omit for an asset without metadata."
    ),
    share: List[int] = typer.Option([], "--share", help="Creator share in percent (repeatable)."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Show the tax / royalty / payment split of a paid settlement."""
    cfg = get_config()
    metadata = None
    if royalty_bps is not None:
        creators = tuple(
            Creator(address=derive_system_identity(f"quote/creator/{i}"), share=s)
            for i, s in enumerate(share)
        )
        metadata = Metadata(seller_fee_bps=royalty_bps, creators=creators)
    try:
        plan = plan_settlement(
            price,
            cfg.fees,
            metadata,
            metadata.creator_addresses() if metadata else (),
        )
    except EscrowError as e:
        _fail(e, as_json)
        return
    _emit(
        {
            "price": plan.price,
            "sales_tax": plan.tax,
            "royalty_total": plan.royalty_total,
            "creator_payouts": [amount for _, amount in plan.payouts],
            "final_amount": plan.final_amount,
        },
        as_json,
    )


@app.command("authority")
def authority(
    salt: Optional[str] = typer.Option(None, "--salt", help="Program identity (hex); default from config."),
    seed: Optional[str] = typer.Option(None, "--seed", help="Authority seed; default from config."),
) -> None:
    """Print the delegated-authority identity."""
    cfg = get_config()
    try:
        salt_b = parse_hex_identity(salt, name="salt") if salt else cfg.program_id
        seed_b = seed.encode("utf-8") if seed else cfg.authority_seed
        identity, _ = derive(seed_b, salt_b)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    typer.echo(to_hex(identity))


@app.command("config")
def config_cmd(
    as_json: bool = typer.Option(False, "--json", help="Emit JSON."),
) -> None:
    """Show the effective engine configuration."""
    cfg = get_config()
    if as_json:
        typer.echo(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    else:
        typer.echo(summary(cfg))


@app.command("version")
def version_cmd() -> None:
    """Print the package version."""
    typer.echo(f"escrow-engine {__version__}")


@app.command("metrics")
def metrics_cmd() -> None:
    """Print the Prometheus exposition text for this process."""
    typer.echo(metrics.generate_latest_text().decode("utf-8"), nl=False)


def main() -> None:  # pragma: no cover - thin wrapper
    app()


__all__ = ["app", "main"]
