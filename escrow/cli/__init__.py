"""escrow.cli — typer command-line tools (`python -m escrow.cli --help`)."""

from .main import app, main

__all__ = ["app", "main"]
