"""Ed25519 primitives for KERI event signatures, over raw key bytes.

The resolver core never verifies anything itself. :class:`Ed25519Verifier`
is the default ``verify(public_key, signature, data) -> bool`` primitive
behind :class:`~did_resolver.keri.verification.EventSignatureCheck`, and
:func:`sign_ed25519` produces the signatures that
:func:`~did_resolver.keri.verification.sign_event` attaches to events
built in code.
"""
from __future__ import annotations

from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)


class SignatureVerifier(Protocol):
    """Anything that can check a detached signature over raw key bytes."""

    def verify(self, public_key_bytes: bytes, signature: bytes, data: bytes) -> bool: ...


class Ed25519Verifier:
    """Checks Ed25519 signatures with the ``cryptography`` backend."""

    def verify(self, public_key_bytes: bytes, signature: bytes, data: bytes) -> bool:
        """Return ``True`` iff *signature* is a valid Ed25519 signature of *data*.

        Key bytes that do not form an Ed25519 public key, and signatures of
        the wrong length, count as invalid rather than raising.
        """
        try:
            Ed25519PublicKey.from_public_bytes(public_key_bytes).verify(signature, data)
        except (InvalidSignature, ValueError):
            return False
        return True


def sign_ed25519(private_key_bytes: bytes, data: bytes) -> bytes:
    """Return the 64-byte Ed25519 signature of *data* under a raw 32-byte seed."""
    return Ed25519PrivateKey.from_private_bytes(private_key_bytes).sign(data)


__all__ = ["Ed25519Verifier", "SignatureVerifier", "sign_ed25519"]
