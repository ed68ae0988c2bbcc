"""KERI derivation codes: key prefixes, key-type labels and self-addressing digests.

A KERI primitive is written as ``<code><base64url-body>``. The code length
is implied by its first character: ``0`` starts a two-character code,
``1`` a four-character code, anything else is a one-character code.

Basic (key) codes
-----------------
``B`` / ``D``
    Ed25519 (non-transferable / transferable), ``Ed25519VerificationKey2018``.
``C``
    X25519, ``X25519KeyAgreementKey2019``.
``1AAA`` / ``1AAB``
    secp256k1 (non-transferable / transferable),
    ``EcdsaSecp256k1VerificationKey2019``.

Self-addressing (digest) codes
------------------------------
``E`` Blake3-256, ``F`` Blake2b-256, ``G`` Blake2s-256, ``H`` SHA3-256,
``I`` SHA2-256.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable

from blake3 import blake3

from did_resolver.encoding import b64url_decode, b64url_encode
from did_resolver.errors import KeyDecodingError

ED25519_KEY_TYPE: str = "Ed25519VerificationKey2018"
X25519_KEY_TYPE: str = "X25519KeyAgreementKey2019"
SECP256K1_KEY_TYPE: str = "EcdsaSecp256k1VerificationKey2019"
UNKNOWN_KEY_TYPE: str = "UnknownKeyType"

ED25519_CODES = frozenset({"B", "D"})
X25519_CODES = frozenset({"C"})
SECP256K1_CODES = frozenset({"1AAA", "1AAB"})

_KEY_TYPES: dict[str, str] = {
    **{code: ED25519_KEY_TYPE for code in ED25519_CODES},
    **{code: X25519_KEY_TYPE for code in X25519_CODES},
    **{code: SECP256K1_KEY_TYPE for code in SECP256K1_CODES},
}

DEFAULT_DIGEST_CODE: str = "E"

_DIGESTS: dict[str, Callable[[bytes], bytes]] = {
    "E": lambda data: blake3(data).digest(),
    "F": lambda data: hashlib.blake2b(data, digest_size=32).digest(),
    "G": lambda data: hashlib.blake2s(data, digest_size=32).digest(),
    "H": lambda data: hashlib.sha3_256(data).digest(),
    "I": lambda data: hashlib.sha256(data).digest(),
}


def code_length(qb64: str) -> int:
    """Return the length of the derivation code that starts *qb64*."""
    if not qb64:
        raise KeyDecodingError("Empty KERI primitive.")
    if qb64[0] == "0":
        return 2
    if qb64[0] == "1":
        return 4
    return 1


def key_type_for(code: str) -> str:
    """Map a basic derivation code to its verification method type label.

    Unrecognized codes map to :data:`UNKNOWN_KEY_TYPE` rather than failing.
    """
    return _KEY_TYPES.get(code, UNKNOWN_KEY_TYPE)


@dataclass(frozen=True)
class KeyPrefix:
    """A public key coupled with its derivation code.

    Parameters
    ----------
    code:
        The derivation code, e.g. ``"D"`` for a transferable Ed25519 key.
    raw:
        The raw public key bytes.
    """

    code: str
    raw: bytes

    @property
    def key_type(self) -> str:
        """The verification method type label for this key."""
        return key_type_for(self.code)

    @property
    def qb64(self) -> str:
        """The ``<code><base64url>`` text form."""
        return self.code + b64url_encode(self.raw)

    @classmethod
    def from_qb64(cls, qb64: str) -> "KeyPrefix":
        """Parse ``<code><base64url>`` text.

        Raises
        ------
        KeyDecodingError
            If the body is not valid base64url or is empty.
        """
        size = code_length(qb64)
        body = qb64[size:]
        if not body:
            raise KeyDecodingError(f"KERI key prefix {qb64!r} has no key body.")
        return cls(code=qb64[:size], raw=b64url_decode(body))


def digest(data: bytes, code: str = DEFAULT_DIGEST_CODE) -> str:
    """Return the self-addressing digest of *data* in ``<code><base64url>`` form.

    Raises
    ------
    KeyDecodingError
        If *code* is not a supported digest code.
    """
    algorithm = _DIGESTS.get(code)
    if algorithm is None:
        raise KeyDecodingError(f"Unsupported KERI digest code {code!r}.")
    return code + b64url_encode(algorithm(data))


def verify_digest(qb64: str, data: bytes) -> bool:
    """Return ``True`` if *qb64* is the self-addressing digest of *data*.

    The algorithm is selected by the digest's own derivation code. An
    unsupported code or a malformed body never matches.
    """
    code = qb64[: code_length(qb64)] if qb64 else ""
    algorithm = _DIGESTS.get(code)
    if algorithm is None:
        return False
    try:
        expected = b64url_decode(qb64[len(code):])
    except KeyDecodingError:
        return False
    return algorithm(data) == expected


__all__ = [
    "DEFAULT_DIGEST_CODE",
    "ED25519_CODES",
    "ED25519_KEY_TYPE",
    "KeyPrefix",
    "SECP256K1_CODES",
    "SECP256K1_KEY_TYPE",
    "UNKNOWN_KEY_TYPE",
    "X25519_CODES",
    "X25519_KEY_TYPE",
    "code_length",
    "digest",
    "key_type_for",
    "verify_digest",
]
