"""Key material carried by verification methods.

A verification method exposes its key in exactly one of three encodings,
mirroring the DID Core property names:

``publicKeyBase58``
    :class:`Base58Key` — base58btc text, validated on construction.
``publicKeyMultibase``
    :class:`MultibaseKey` — raw key bytes, rendered as ``z``-prefixed
    base58btc when serialized.
``publicKeyJwk``
    :class:`JwkKey` — a structured JSON Web Key.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from did_resolver.encoding import b58_decode, multibase_decode, multibase_encode
from did_resolver.errors import KeyDecodingError


@dataclass(frozen=True)
class Base58Key:
    """A key encoded as base58btc text.

    Raises
    ------
    KeyDecodingError
        On construction, if *value* is not valid base58btc.
    """

    value: str

    def __post_init__(self) -> None:
        b58_decode(self.value)

    def to_bytes(self) -> bytes:
        """Return the decoded key bytes."""
        return b58_decode(self.value)


@dataclass(frozen=True)
class MultibaseKey:
    """A key held as raw bytes, serialized in multibase form."""

    value: bytes

    def to_bytes(self) -> bytes:
        """Return the key bytes unchanged."""
        return self.value


@dataclass(frozen=True)
class JwkKey:
    """A JSON Web Key (RFC 7517) with the fields DID documents use.

    Parameters
    ----------
    kty:
        Key type, e.g. ``"OKP"`` or ``"EC"``.
    crv:
        Curve name, e.g. ``"Ed25519"``, ``"X25519"``, ``"secp256k1"``.
    x, y:
        Base64url-encoded coordinates.
    key_id:
        Optional ``kid`` member.
    """

    kty: str
    crv: str = ""
    x: str | None = None
    y: str | None = None
    key_id: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"kty": self.kty, "crv": self.crv}
        if self.x is not None:
            data["x"] = self.x
        if self.y is not None:
            data["y"] = self.y
        if self.key_id is not None:
            data["kid"] = self.key_id
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "JwkKey":
        if not isinstance(data, dict) or "kty" not in data:
            raise KeyDecodingError(f"Malformed JWK {data!r}: 'kty' is required.")
        return cls(
            kty=str(data["kty"]),
            crv=str(data.get("crv", "")),
            x=data.get("x"),
            y=data.get("y"),
            key_id=data.get("kid"),
        )


KeyMaterial = Union[Base58Key, MultibaseKey, JwkKey]

_BASE58_SUFFIX = "KeyBase58"
_MULTIBASE_SUFFIX = "KeyMultibase"
_JWK_SUFFIX = "KeyJwk"


def key_to_dict(key: KeyMaterial, role: str = "public") -> dict[str, object]:
    """Render *key* under the DID Core property for *role* (``public``/``private``)."""
    if isinstance(key, Base58Key):
        return {f"{role}{_BASE58_SUFFIX}": key.value}
    if isinstance(key, MultibaseKey):
        return {f"{role}{_MULTIBASE_SUFFIX}": multibase_encode(key.value)}
    return {f"{role}{_JWK_SUFFIX}": key.to_dict()}


def key_from_dict(data: dict[str, Any], role: str = "public") -> KeyMaterial | None:
    """Read the *role* key property from a verification-method mapping.

    Returns ``None`` when the mapping declares no key for *role*.

    Raises
    ------
    KeyDecodingError
        If the declared key is malformed.
    """
    if f"{role}{_BASE58_SUFFIX}" in data:
        return Base58Key(str(data[f"{role}{_BASE58_SUFFIX}"]))
    if f"{role}{_MULTIBASE_SUFFIX}" in data:
        return MultibaseKey(multibase_decode(str(data[f"{role}{_MULTIBASE_SUFFIX}"])))
    if f"{role}{_JWK_SUFFIX}" in data:
        return JwkKey.from_dict(data[f"{role}{_JWK_SUFFIX}"])
    return None


__all__ = [
    "Base58Key",
    "JwkKey",
    "KeyMaterial",
    "MultibaseKey",
    "key_from_dict",
    "key_to_dict",
]
