"""Base encodings used by DID URLs, verification methods and KERI primitives.

Thin wrappers that translate codec failures into
:class:`~did_resolver.errors.KeyDecodingError`, so corrupt input is never
confused with an empty lookup result.
"""
from __future__ import annotations

import base64
import binascii

import base58

from did_resolver.errors import KeyDecodingError

_MULTIBASE_BASE58BTC = "z"
_MULTIBASE_BASE64URL = "u"


def b64url_decode(encoded: str) -> bytes:
    """Decode base64url text, with or without ``=`` padding.

    Raises
    ------
    KeyDecodingError
        If *encoded* contains characters outside the base64url alphabet
        or has an impossible length.
    """
    stripped = encoded.rstrip("=")
    padded = stripped + "=" * (-len(stripped) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyDecodingError(f"Malformed base64url value {encoded!r}: {exc}") from exc


def b64url_encode(data: bytes) -> str:
    """Encode *data* as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b58_decode(encoded: str) -> bytes:
    """Decode a base58btc string.

    Raises
    ------
    KeyDecodingError
        If the string is empty or contains a character outside the
        base58btc alphabet.
    """
    if not encoded:
        raise KeyDecodingError("Empty base58 value.")
    try:
        return base58.b58decode(encoded)
    except ValueError as exc:
        raise KeyDecodingError(f"Malformed base58 value {encoded!r}: {exc}") from exc


def b58_encode(data: bytes) -> str:
    """Encode *data* as base58btc text."""
    return base58.b58encode(data).decode("ascii")


def multibase_decode(encoded: str) -> bytes:
    """Decode a multibase string (``z`` base58btc or ``u`` base64url)."""
    if not encoded:
        raise KeyDecodingError("Empty multibase value.")
    prefix, body = encoded[0], encoded[1:]
    if prefix == _MULTIBASE_BASE58BTC:
        return b58_decode(body)
    if prefix == _MULTIBASE_BASE64URL:
        return b64url_decode(body)
    raise KeyDecodingError(
        f"Unsupported multibase prefix {prefix!r} in {encoded!r}. "
        "Only 'z' (base58btc) and 'u' (base64url) are supported."
    )


def multibase_encode(data: bytes) -> str:
    """Encode *data* as a ``z``-prefixed base58btc multibase string."""
    return _MULTIBASE_BASE58BTC + b58_encode(data)


__all__ = [
    "b58_decode",
    "b58_encode",
    "b64url_decode",
    "b64url_encode",
    "multibase_decode",
    "multibase_encode",
]
