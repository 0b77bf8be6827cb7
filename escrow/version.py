"""escrow.version — package version (semver, bumped on tagged releases)."""

__version__ = "0.1.0"

__all__ = ["__version__"]
