"""VerificationDocument — the resolved DID document and its key queries.

The document follows the W3C DID Core data model:
https://www.w3.org/TR/did-core/#data-model

Query operations
----------------
All ``find_*`` methods are read-only and total: a missing key is a
routine outcome and is reported as ``None``, never as an exception.
Malformed key encodings are rejected earlier, when the document is built
(see :mod:`did_resolver.document.keys`).

Matching is by substring of the verification method's ``type`` label and
strictly first-match in document order, so querying ``"Ed25519"`` matches
``Ed25519VerificationKey2018`` and ``Ed25519VerificationKey2020`` alike.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator

from did_resolver.document.keys import (
    Base58Key,
    JwkKey,
    KeyMaterial,
    key_from_dict,
    key_to_dict,
)
from did_resolver.errors import KeyDecodingError

logger = logging.getLogger(__name__)

DID_CONTEXT: str = "https://www.w3.org/ns/did/v1"

# Relationship properties: (python attribute, JSON name)
_RELATIONSHIPS: tuple[tuple[str, str], ...] = (
    ("authentication", "authentication"),
    ("assertion_method", "assertionMethod"),
    ("capability_delegation", "capabilityDelegation"),
    ("capability_invocation", "capabilityInvocation"),
    ("key_agreement", "keyAgreement"),
)


# ------------------------------------------------------------------
# Verification method
# ------------------------------------------------------------------


@dataclass(frozen=True)
class VerificationMethod:
    """A public key attached to a DID document.

    Parameters
    ----------
    id:
        The verification method identifier (e.g. ``did:key:z6Mk...#z6Mk...``).
    key_type:
        Free-text type label such as ``"Ed25519VerificationKey2018"``.
        Queries match against it by substring.
    controller:
        The DID that controls this key.
    public_key:
        The public key material, if the method declares one.
    private_key:
        Never populated by a resolver. Present for symmetry with key
        management code that reuses this type.
    """

    id: str
    key_type: str
    controller: str
    public_key: KeyMaterial | None = None
    private_key: KeyMaterial | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("VerificationMethod.id must not be empty.")

    def to_dict(self) -> dict[str, object]:
        """Serialize to a W3C-compatible plain dictionary."""
        data: dict[str, object] = {
            "id": self.id,
            "type": self.key_type,
            "controller": self.controller,
        }
        if self.public_key is not None:
            data.update(key_to_dict(self.public_key, "public"))
        if self.private_key is not None:
            data.update(key_to_dict(self.private_key, "private"))
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerificationMethod":
        """Build a verification method from its JSON mapping.

        Raises
        ------
        KeyDecodingError
            If the mapping is missing ``id`` or declares a malformed key.
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise KeyDecodingError(f"Malformed verification method {data!r}: 'id' is required.")
        return cls(
            id=str(data["id"]),
            key_type=str(data.get("type", "")),
            controller=str(data.get("controller", "")),
            public_key=key_from_dict(data, "public"),
            private_key=key_from_dict(data, "private"),
        )


# ------------------------------------------------------------------
# Key agreement
# ------------------------------------------------------------------


@dataclass(frozen=True)
class KeyAgreement:
    """A decoded ``keyAgreement`` entry."""

    id: str
    type: str
    controller: str
    public_key_base58: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "type": self.type,
            "controller": self.controller,
            "publicKeyBase58": self.public_key_base58,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "KeyAgreement":
        if not isinstance(data, dict):
            raise KeyDecodingError(f"Key agreement entry {data!r} is not an object.")
        try:
            return cls(
                id=str(data["id"]),
                type=str(data["type"]),
                controller=str(data["controller"]),
                public_key_base58=str(data["publicKeyBase58"]),
            )
        except KeyError as exc:
            raise KeyDecodingError(f"Key agreement entry is missing {exc}.") from exc

    @classmethod
    def from_verification_method(cls, method: VerificationMethod) -> "KeyAgreement":
        if not isinstance(method.public_key, Base58Key):
            raise KeyDecodingError(
                f"Verification method {method.id!r} has no base58 public key."
            )
        return cls(
            id=method.id,
            type=method.key_type,
            controller=method.controller,
            public_key_base58=method.public_key.value,
        )


# ------------------------------------------------------------------
# Verification document (Pydantic v2)
# ------------------------------------------------------------------


class VerificationDocument(BaseModel):
    """A resolved DID document.

    Built fresh for every resolution and never mutated afterwards. A
    document with no verification methods is valid: it describes an
    identifier with no discoverable keys.

    Parameters
    ----------
    context:
        JSON-LD context, a URI or list of URIs.
    id:
        The resolved DID.
    verification_method:
        Public keys, in document order. Unique by ``id``.
    authentication, assertion_method, capability_delegation, capability_invocation:
        Optional relationship lists of method references or embedded methods.
    key_agreement:
        Optional list of key agreement entries, kept as opaque JSON values
        (references or embedded objects) and decoded on demand by
        :meth:`find_key_agreement`.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    context: str | list[str] = DID_CONTEXT
    id: str
    verification_method: list[VerificationMethod] = Field(default_factory=list)
    authentication: list[str | dict[str, Any]] | None = None
    assertion_method: list[str | dict[str, Any]] | None = None
    capability_delegation: list[str | dict[str, Any]] | None = None
    capability_invocation: list[str | dict[str, Any]] | None = None
    key_agreement: list[str | dict[str, Any]] | None = None

    @field_validator("verification_method")
    @classmethod
    def validate_unique_method_ids(
        cls, value: list[VerificationMethod]
    ) -> list[VerificationMethod]:
        """Reject documents declaring two verification methods with one id."""
        seen: set[str] = set()
        for method in value:
            if method.id in seen:
                raise ValueError(f"Duplicate verification method id {method.id!r}.")
            seen.add(method.id)
        return value

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def resolve_verification_method(self, method_id: str) -> VerificationMethod | None:
        """Return the VerificationMethod with the given id, or None."""
        for method in self.verification_method:
            if method.id == method_id:
                return method
        return None

    def _first_for_curve(self, curve: str) -> VerificationMethod | None:
        for method in self.verification_method:
            if curve in method.key_type:
                return method
        return None

    def find_public_key_for_curve(self, curve: str) -> bytes | None:
        """Return the key bytes of the first method whose type contains *curve*.

        ``Base58`` keys are decoded, ``Multibase`` bytes are returned as is.
        A JWK match yields ``None``: JWKs have no agreed raw byte form here.

        Parameters
        ----------
        curve:
            Substring to look for in each method's ``key_type``
            (e.g. ``"Ed25519"``, ``"X25519"``).

        Returns
        -------
        bytes | None
            The decoded public key, or ``None`` when no method matches or
            the first match has no usable key.
        """
        method = self._first_for_curve(curve)
        if method is None or method.public_key is None:
            return None
        if isinstance(method.public_key, JwkKey):
            return None
        return method.public_key.to_bytes()

    def find_public_key_id_for_curve(self, curve: str) -> str | None:
        """Return the ``kid`` of the first JWK-typed key matching *curve*.

        A JWK method matches when its ``key_type`` or its JWK ``crv``
        contains *curve*. Returns ``None`` when nothing matches or the
        matching JWK carries no ``kid``.
        """
        for method in self.verification_method:
            key = method.public_key
            if not isinstance(key, JwkKey):
                continue
            if curve in method.key_type or curve in key.crv:
                return key.key_id
        return None

    def find_public_key_controller_for_curve(self, curve: str) -> str | None:
        """Return the controller of the first method whose type contains *curve*."""
        method = self._first_for_curve(curve)
        return method.controller if method is not None else None

    def find_key_agreement(self, pattern: str) -> KeyAgreement | None:
        """Return the first ``keyAgreement`` entry whose JSON form contains *pattern*.

        Embedded objects are decoded directly; string entries are parsed as
        JSON when they look like an object and otherwise dereferenced
        against :attr:`verification_method`. Returns ``None`` if no entry
        matches or the matching entry cannot be decoded.
        """
        for entry in self.key_agreement or []:
            serialized = (
                entry if isinstance(entry, str) else json.dumps(entry, separators=(",", ":"))
            )
            if pattern not in serialized:
                continue
            try:
                return self._decode_key_agreement(entry)
            except (KeyDecodingError, ValueError) as exc:
                logger.debug("Undecodable keyAgreement entry in %s: %s", self.id, exc)
                return None
        return None

    def _decode_key_agreement(self, entry: str | dict[str, Any]) -> KeyAgreement:
        if isinstance(entry, dict):
            return KeyAgreement.from_dict(entry)
        if entry.lstrip().startswith("{"):
            return KeyAgreement.from_dict(json.loads(entry))
        method = self.resolve_verification_method(entry)
        if method is None:
            raise KeyDecodingError(f"keyAgreement reference {entry!r} is not declared.")
        return KeyAgreement.from_verification_method(method)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize using the DID Core JSON property names."""
        data: dict[str, object] = {
            "@context": self.context,
            "id": self.id,
            "verificationMethod": [vm.to_dict() for vm in self.verification_method],
        }
        for attribute, json_name in _RELATIONSHIPS:
            value = getattr(self, attribute)
            if value is not None:
                data[json_name] = list(value)
        return data

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize this document to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VerificationDocument":
        """Build a document from its DID Core JSON mapping.

        Raises
        ------
        KeyDecodingError
            If ``id`` is missing or a verification method is malformed.
        ValueError
            If the document fails validation (e.g. duplicate method ids).
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise KeyDecodingError("DID document must be an object with an 'id'.")
        relationships = {
            attribute: data.get(json_name)
            for attribute, json_name in _RELATIONSHIPS
        }
        return cls(
            context=data.get("@context", data.get("context", DID_CONTEXT)),
            id=str(data["id"]),
            verification_method=[
                VerificationMethod.from_dict(vm)
                for vm in data.get("verificationMethod", [])
            ],
            **relationships,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "VerificationDocument":
        """Deserialize a document from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise KeyDecodingError(f"Invalid JSON: {exc}") from exc
        return cls.from_dict(data)
