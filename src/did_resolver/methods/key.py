"""DidKeyStrategy — the W3C ``did:key`` method.

Implements resolution as specified in:
https://w3c-ccg.github.io/did-method-key/

did:key decoding
----------------
1. Strip ``did:key:``; the rest is the multibase fingerprint.
2. Require the ``z`` (base58btc) multibase prefix and decode it.
3. Read the 2-byte varint multicodec prefix to learn the key type:
   ``0xed01`` Ed25519, ``0xec01`` X25519, ``0xe701`` secp256k1.
4. The remaining bytes are the raw public key.

An Ed25519 key also yields an X25519 key-agreement method, derived with
libsodium's birational map (``crypto_sign_ed25519_pk_to_curve25519``).
The document is built entirely from the DID string; no registry is read.
"""
from __future__ import annotations

import logging

from nacl.bindings import crypto_sign_ed25519_pk_to_curve25519
from nacl.exceptions import CryptoError

from did_resolver.document import (
    Base58Key,
    KeyAgreement,
    VerificationDocument,
    VerificationMethod,
)
from did_resolver.encoding import b58_encode, multibase_decode, multibase_encode
from did_resolver.errors import DIDResolutionError, KeyDecodingError
from did_resolver.keri.codes import ED25519_KEY_TYPE, SECP256K1_KEY_TYPE, X25519_KEY_TYPE
from did_resolver.methods.base import ResolutionStrategy, method_specific_id, strategy_plugins

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Multicodec prefixes (varint-encoded)
# ---------------------------------------------------------------------------

ED25519_MULTICODEC: bytes = b"\xed\x01"
X25519_MULTICODEC: bytes = b"\xec\x01"
SECP256K1_MULTICODEC: bytes = b"\xe7\x01"

# multicodec -> (key type label, expected raw key length)
_KEY_CODECS: dict[bytes, tuple[str, int]] = {
    ED25519_MULTICODEC: (ED25519_KEY_TYPE, 32),
    X25519_MULTICODEC: (X25519_KEY_TYPE, 32),
    SECP256K1_MULTICODEC: (SECP256K1_KEY_TYPE, 33),
}


def fingerprint(multicodec: bytes, public_key: bytes) -> str:
    """Return the ``z``-prefixed multibase fingerprint of a public key."""
    return multibase_encode(multicodec + public_key)


def did_key_from_ed25519(public_key: bytes) -> str:
    """Return the ``did:key`` DID for a raw 32-byte Ed25519 public key."""
    if len(public_key) != 32:
        raise ValueError(f"Ed25519 public key must be 32 bytes, got {len(public_key)}.")
    return f"did:key:{fingerprint(ED25519_MULTICODEC, public_key)}"


def ed25519_to_x25519(public_key: bytes) -> bytes:
    """Convert an Ed25519 public key to its X25519 counterpart.

    Raises
    ------
    KeyDecodingError
        If *public_key* is not a valid Ed25519 curve point.
    """
    try:
        return crypto_sign_ed25519_pk_to_curve25519(public_key)
    except CryptoError as exc:
        raise KeyDecodingError(f"Cannot derive an X25519 key: {exc}") from exc


@strategy_plugins.register("key")
class DidKeyStrategy(ResolutionStrategy):
    """Resolve ``did:key`` identifiers by decoding the embedded public key.

    Example
    -------
    ::

        strategy = DidKeyStrategy()
        document = strategy.resolve("did:key:z6MkiTBz1ymuepAQ4HEHYSF1H8quG5GLVVQR3djdX3mDooWp")
        document.find_public_key_for_curve("Ed25519")  # 32 raw bytes
    """

    method = "key"

    def resolve(self, did: str, side_channel: bytes | None = None) -> VerificationDocument:
        """Build the document for *did*. *side_channel* is ignored.

        Raises
        ------
        DIDResolutionError
            If the fingerprint is not base58btc, uses an unknown multicodec,
            or carries a key of the wrong length.
        KeyDecodingError
            If the fingerprint contains characters outside base58btc.
        """
        try:
            key_fingerprint = method_specific_id(did, self.method)
        except ValueError as exc:
            raise DIDResolutionError(str(exc)) from exc
        if not key_fingerprint.startswith("z"):
            raise DIDResolutionError(
                f"did:key fingerprint {key_fingerprint!r} must use the 'z' base58btc multibase prefix."
            )

        decoded = multibase_decode(key_fingerprint)
        multicodec, public_key = decoded[:2], decoded[2:]
        if multicodec not in _KEY_CODECS:
            raise DIDResolutionError(
                f"Unsupported did:key multicodec 0x{multicodec.hex()} in {did!r}."
            )
        key_type, key_length = _KEY_CODECS[multicodec]
        if len(public_key) != key_length:
            raise DIDResolutionError(
                f"{key_type} key in {did!r} must be {key_length} bytes, got {len(public_key)}."
            )

        primary = VerificationMethod(
            id=f"{did}#{key_fingerprint}",
            key_type=key_type,
            controller=did,
            public_key=Base58Key(b58_encode(public_key)),
        )

        if multicodec == X25519_MULTICODEC:
            logger.debug("Resolved %s to an X25519 key-agreement key", did)
            return VerificationDocument(
                id=did,
                verification_method=[primary],
                key_agreement=[KeyAgreement.from_verification_method(primary).to_dict()],
            )

        methods = [primary]
        key_agreement = None
        if multicodec == ED25519_MULTICODEC:
            try:
                x25519_key = ed25519_to_x25519(public_key)
            except KeyDecodingError as exc:
                raise DIDResolutionError(f"Invalid Ed25519 key in {did!r}: {exc}") from exc
            agreement = VerificationMethod(
                id=f"{did}#{fingerprint(X25519_MULTICODEC, x25519_key)}",
                key_type=X25519_KEY_TYPE,
                controller=did,
                public_key=Base58Key(b58_encode(x25519_key)),
            )
            methods.append(agreement)
            key_agreement = [KeyAgreement.from_verification_method(agreement).to_dict()]

        logger.debug("Resolved %s to a %s key", did, key_type)
        return VerificationDocument(
            id=did,
            verification_method=methods,
            authentication=[primary.id],
            assertion_method=[primary.id],
            capability_delegation=[primary.id],
            capability_invocation=[primary.id],
            key_agreement=key_agreement,
        )


__all__ = [
    "ED25519_MULTICODEC",
    "SECP256K1_MULTICODEC",
    "X25519_MULTICODEC",
    "DidKeyStrategy",
    "did_key_from_ed25519",
    "ed25519_to_x25519",
    "fingerprint",
]
