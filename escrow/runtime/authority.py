"""
escrow.runtime.authority — the engine-controlled delegated signing identity.

At InitEscrow the initializer hands control of the held asset account to the
Delegated Authority. From then on only the engine can move the escrowed unit,
because only the engine can present an Authorization carrying a valid proof for
that identity.

Derivation
----------
    identity = SHA3-256("escrow/delegated_authority/v1" | len(seed) | seed | salt)

The seed is fixed by configuration (default b"escrow") and the salt is the program
identity, so the identity is identical on every invocation and never persisted.
Ledgers verify a proof-carrying Authorization by re-deriving the identity from the
proof (`verify_authorization`); ordinary parties authorize by being transaction
signers, which is represented by an Authorization without a proof.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import AuthorityMismatch
from .system import ensure_identity

_DOMAIN = b"escrow/delegated_authority/v1"


@dataclass(frozen=True)
class AuthorityProof:
    seed: bytes
    salt: bytes


@dataclass(frozen=True)
class Authorization:
    identity: bytes
    operation: str
    proof: Optional[AuthorityProof] = None

    @property
    def is_delegated(self) -> bool:
        return self.proof is not None


def derive(seed: bytes, salt: bytes) -> Tuple[bytes, AuthorityProof]:
    """Derive the delegated identity and the proof that re-derives it."""
    if not seed or len(seed) > 32:
        raise ValueError("authority seed must be 1..32 bytes")
    salt = ensure_identity(salt, name="salt")
    h = hashlib.sha3_256()
    h.update(_DOMAIN)
    h.update(bytes([len(seed)]))
    h.update(seed)
    h.update(salt)
    return h.digest(), AuthorityProof(seed=bytes(seed), salt=salt)


def verify_authorization(auth: Authorization) -> bool:
    """True iff a proof-carrying Authorization re-derives to its identity."""
    if auth.proof is None:
        return False
    identity, _ = derive(auth.proof.seed, auth.proof.salt)
    return identity == auth.identity


def signer_authorization(identity: bytes, operation: str) -> Authorization:
    """Authorization of a party that signed the enclosing transaction."""
    return Authorization(identity=ensure_identity(identity), operation=operation)


class DelegatedAuthority:
    """
    Capability object handed to the engine. Tests may substitute any object with
    the same `identity` / `derive()` / `sign_for()` surface.
    """

    def __init__(self, seed: bytes, salt: bytes) -> None:
        self._identity, self._proof = derive(seed, salt)

    @classmethod
    def from_config(cls, config) -> "DelegatedAuthority":
        return cls(config.authority_seed, config.program_id)

    @property
    def identity(self) -> bytes:
        return self._identity

    def derive(self) -> Tuple[bytes, AuthorityProof]:
        return self._identity, self._proof

    def sign_for(self, identity: bytes, operation: str) -> Authorization:
        """
        Produce an Authorization for `operation` on behalf of `identity`.

        Raises:
            AuthorityMismatch if `identity` is not this authority.
        """
        if identity != self._identity:
            raise AuthorityMismatch(
                "delegated authority cannot sign for a foreign identity",
                identity="0x" + bytes(identity).hex(),
            )
        return Authorization(identity=self._identity, operation=operation, proof=self._proof)


__all__ = [
    "AuthorityProof",
    "Authorization",
    "DelegatedAuthority",
    "derive",
    "verify_authorization",
    "signer_authorization",
]
