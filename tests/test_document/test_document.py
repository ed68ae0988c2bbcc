"""Tests for did_resolver.document — VerificationDocument and its key queries."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from did_resolver.document import (
    DID_CONTEXT,
    Base58Key,
    JwkKey,
    KeyAgreement,
    MultibaseKey,
    VerificationDocument,
    VerificationMethod,
)
from did_resolver.encoding import b58_encode
from did_resolver.errors import KeyDecodingError

DID = "did:example:123"
ED_KEY_A = bytes(range(32))
ED_KEY_B = bytes(range(32, 64))
X_KEY = bytes(range(64, 96))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def ed25519_method() -> VerificationMethod:
    return VerificationMethod(
        id=f"{DID}#ed-1",
        key_type="Ed25519VerificationKey2018",
        controller=DID,
        public_key=Base58Key(b58_encode(ED_KEY_A)),
    )


@pytest.fixture()
def x25519_method() -> VerificationMethod:
    return VerificationMethod(
        id=f"{DID}#x-1",
        key_type="X25519KeyAgreementKey2019",
        controller="did:example:controller",
        public_key=Base58Key(b58_encode(X_KEY)),
    )


@pytest.fixture()
def jwk_method() -> VerificationMethod:
    return VerificationMethod(
        id=f"{DID}#jwk-1",
        key_type="JsonWebKey2020",
        controller="did:example:jwk-owner",
        public_key=JwkKey(kty="OKP", crv="Ed25519", x="abc", key_id="jwk-kid-1"),
    )


@pytest.fixture()
def document(
    ed25519_method: VerificationMethod, x25519_method: VerificationMethod
) -> VerificationDocument:
    return VerificationDocument(
        id=DID,
        verification_method=[ed25519_method, x25519_method],
        authentication=[ed25519_method.id],
        key_agreement=[KeyAgreement.from_verification_method(x25519_method).to_dict()],
    )


# ---------------------------------------------------------------------------
# Construction and invariants
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self) -> None:
        doc = VerificationDocument(id=DID)
        assert doc.context == DID_CONTEXT
        assert doc.verification_method == []
        assert doc.authentication is None
        assert doc.key_agreement is None

    def test_duplicate_method_ids_rejected(self, ed25519_method: VerificationMethod) -> None:
        with pytest.raises(ValidationError):
            VerificationDocument(id=DID, verification_method=[ed25519_method, ed25519_method])

    def test_document_is_frozen(self, document: VerificationDocument) -> None:
        with pytest.raises(ValidationError):
            document.id = "did:example:other"  # type: ignore[misc]

    def test_method_requires_id(self) -> None:
        with pytest.raises(ValueError):
            VerificationMethod(id="", key_type="Ed25519VerificationKey2018", controller=DID)

    def test_malformed_base58_rejected_at_construction(self) -> None:
        with pytest.raises(KeyDecodingError):
            Base58Key("not-base58-0OIl")


# ---------------------------------------------------------------------------
# find_public_key_for_curve
# ---------------------------------------------------------------------------


class TestFindPublicKeyForCurve:
    def test_empty_document_returns_none(self) -> None:
        doc = VerificationDocument(id=DID)
        assert doc.find_public_key_for_curve("Ed25519") is None

    def test_base58_key_is_decoded(self, document: VerificationDocument) -> None:
        assert document.find_public_key_for_curve("Ed25519") == ED_KEY_A

    def test_no_match_returns_none(self, document: VerificationDocument) -> None:
        assert document.find_public_key_for_curve("secp256k1") is None

    def test_first_match_wins(self, ed25519_method: VerificationMethod) -> None:
        second = VerificationMethod(
            id=f"{DID}#ed-2",
            key_type="Ed25519VerificationKey2020",
            controller=DID,
            public_key=Base58Key(b58_encode(ED_KEY_B)),
        )
        doc = VerificationDocument(id=DID, verification_method=[ed25519_method, second])
        assert doc.find_public_key_for_curve("Ed25519") == ED_KEY_A

        reordered = VerificationDocument(id=DID, verification_method=[second, ed25519_method])
        assert reordered.find_public_key_for_curve("Ed25519") == ED_KEY_B

    def test_substring_match(self, document: VerificationDocument) -> None:
        assert document.find_public_key_for_curve("Ed") == ED_KEY_A
        assert document.find_public_key_for_curve("KeyAgreement") == X_KEY

    def test_multibase_bytes_pass_through(self) -> None:
        method = VerificationMethod(
            id=f"{DID}#mb",
            key_type="X25519KeyAgreementKey2019",
            controller=DID,
            public_key=MultibaseKey(X_KEY),
        )
        doc = VerificationDocument(id=DID, verification_method=[method])
        assert doc.find_public_key_for_curve("X25519") == X_KEY

    def test_jwk_match_yields_none(self, jwk_method: VerificationMethod) -> None:
        doc = VerificationDocument(id=DID, verification_method=[jwk_method])
        assert doc.find_public_key_for_curve("JsonWebKey") is None

    def test_method_without_key_yields_none(self) -> None:
        method = VerificationMethod(
            id=f"{DID}#bare", key_type="Ed25519VerificationKey2018", controller=DID
        )
        doc = VerificationDocument(id=DID, verification_method=[method])
        assert doc.find_public_key_for_curve("Ed25519") is None


# ---------------------------------------------------------------------------
# find_public_key_id_for_curve / find_public_key_controller_for_curve
# ---------------------------------------------------------------------------


class TestKeyIdAndController:
    def test_key_id_from_jwk_crv(
        self, ed25519_method: VerificationMethod, jwk_method: VerificationMethod
    ) -> None:
        doc = VerificationDocument(id=DID, verification_method=[ed25519_method, jwk_method])
        assert doc.find_public_key_id_for_curve("Ed25519") == "jwk-kid-1"

    def test_key_id_from_jwk_type(self, jwk_method: VerificationMethod) -> None:
        doc = VerificationDocument(id=DID, verification_method=[jwk_method])
        assert doc.find_public_key_id_for_curve("JsonWebKey") == "jwk-kid-1"

    def test_key_id_ignores_non_jwk_keys(self, document: VerificationDocument) -> None:
        assert document.find_public_key_id_for_curve("Ed25519") is None

    def test_key_id_none_when_jwk_has_no_kid(self) -> None:
        method = VerificationMethod(
            id=f"{DID}#jwk",
            key_type="JsonWebKey2020",
            controller=DID,
            public_key=JwkKey(kty="OKP", crv="X25519", x="abc"),
        )
        doc = VerificationDocument(id=DID, verification_method=[method])
        assert doc.find_public_key_id_for_curve("X25519") is None

    def test_controller_of_first_match(self, document: VerificationDocument) -> None:
        assert document.find_public_key_controller_for_curve("X25519") == "did:example:controller"
        assert document.find_public_key_controller_for_curve("Ed25519") == DID

    def test_controller_regardless_of_encoding(self, jwk_method: VerificationMethod) -> None:
        doc = VerificationDocument(id=DID, verification_method=[jwk_method])
        assert doc.find_public_key_controller_for_curve("JsonWebKey") == "did:example:jwk-owner"

    def test_controller_none_on_empty_document(self) -> None:
        assert VerificationDocument(id=DID).find_public_key_controller_for_curve("Ed") is None


# ---------------------------------------------------------------------------
# find_key_agreement
# ---------------------------------------------------------------------------


class TestFindKeyAgreement:
    def test_embedded_entry(self, document: VerificationDocument) -> None:
        agreement = document.find_key_agreement("X25519")
        assert agreement == KeyAgreement(
            id=f"{DID}#x-1",
            type="X25519KeyAgreementKey2019",
            controller="did:example:controller",
            public_key_base58=b58_encode(X_KEY),
        )

    def test_compact_json_pattern_matches_embedded_entry(
        self, document: VerificationDocument
    ) -> None:
        agreement = document.find_key_agreement('"type":"X25519')
        assert agreement is not None
        assert agreement.id == f"{DID}#x-1"

    def test_no_key_agreement_list(self) -> None:
        assert VerificationDocument(id=DID).find_key_agreement("X25519") is None

    def test_no_matching_entry(self, document: VerificationDocument) -> None:
        assert document.find_key_agreement("secp256k1") is None

    def test_reference_is_dereferenced(self, x25519_method: VerificationMethod) -> None:
        doc = VerificationDocument(
            id=DID, verification_method=[x25519_method], key_agreement=[x25519_method.id]
        )
        agreement = doc.find_key_agreement("#x-1")
        assert agreement is not None
        assert agreement.public_key_base58 == b58_encode(X_KEY)

    def test_json_string_entry(self) -> None:
        entry = {
            "id": f"{DID}#x-9",
            "type": "X25519KeyAgreementKey2019",
            "controller": DID,
            "publicKeyBase58": b58_encode(X_KEY),
        }
        doc = VerificationDocument(id=DID, key_agreement=[json.dumps(entry)])
        agreement = doc.find_key_agreement("x-9")
        assert agreement is not None
        assert agreement.id == f"{DID}#x-9"

    def test_first_matching_entry_wins(self) -> None:
        first = {"id": "a#1", "type": "X25519", "controller": "a", "publicKeyBase58": "abc"}
        second = {"id": "b#1", "type": "X25519", "controller": "b", "publicKeyBase58": "def"}
        doc = VerificationDocument(id=DID, key_agreement=[first, second])
        agreement = doc.find_key_agreement("X25519")
        assert agreement is not None
        assert agreement.controller == "a"

    def test_undecodable_match_yields_none(self) -> None:
        doc = VerificationDocument(
            id=DID, key_agreement=[{"id": "a#1", "type": "X25519KeyAgreementKey2019"}]
        )
        assert doc.find_key_agreement("X25519") is None

    def test_dangling_reference_yields_none(self) -> None:
        doc = VerificationDocument(id=DID, key_agreement=[f"{DID}#missing"])
        assert doc.find_key_agreement("missing") is None


# ---------------------------------------------------------------------------
# resolve_verification_method
# ---------------------------------------------------------------------------


class TestResolveVerificationMethod:
    def test_found(self, document: VerificationDocument, ed25519_method: VerificationMethod) -> None:
        assert document.resolve_verification_method(f"{DID}#ed-1") == ed25519_method

    def test_missing(self, document: VerificationDocument) -> None:
        assert document.resolve_verification_method(f"{DID}#nope") is None


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_to_dict_uses_did_core_names(self, document: VerificationDocument) -> None:
        data = document.to_dict()
        assert data["@context"] == DID_CONTEXT
        assert data["id"] == DID
        assert data["authentication"] == [f"{DID}#ed-1"]
        assert "keyAgreement" in data
        assert "assertionMethod" not in data
        method = data["verificationMethod"][0]
        assert method == {
            "id": f"{DID}#ed-1",
            "type": "Ed25519VerificationKey2018",
            "controller": DID,
            "publicKeyBase58": b58_encode(ED_KEY_A),
        }

    def test_multibase_and_jwk_property_names(self, jwk_method: VerificationMethod) -> None:
        multibase = VerificationMethod(
            id=f"{DID}#mb", key_type="X25519", controller=DID, public_key=MultibaseKey(X_KEY)
        )
        doc = VerificationDocument(id=DID, verification_method=[multibase, jwk_method])
        methods = doc.to_dict()["verificationMethod"]
        assert methods[0]["publicKeyMultibase"].startswith("z")
        assert methods[1]["publicKeyJwk"]["kid"] == "jwk-kid-1"

    def test_json_round_trip(
        self, document: VerificationDocument, jwk_method: VerificationMethod
    ) -> None:
        multibase = VerificationMethod(
            id=f"{DID}#mb", key_type="X25519", controller=DID, public_key=MultibaseKey(X_KEY)
        )
        doc = document.model_copy(
            update={"verification_method": [*document.verification_method, jwk_method, multibase]}
        )
        restored = VerificationDocument.from_json(doc.to_json())
        assert restored.to_dict() == doc.to_dict()
        assert restored.find_public_key_for_curve("Ed25519") == ED_KEY_A

    def test_from_dict_accepts_context_list(self) -> None:
        doc = VerificationDocument.from_dict(
            {"@context": [DID_CONTEXT, "https://w3id.org/security/v1"], "id": DID}
        )
        assert doc.context == [DID_CONTEXT, "https://w3id.org/security/v1"]

    def test_from_dict_requires_id(self) -> None:
        with pytest.raises(KeyDecodingError):
            VerificationDocument.from_dict({"verificationMethod": []})

    def test_from_dict_rejects_malformed_key(self) -> None:
        with pytest.raises(KeyDecodingError):
            VerificationDocument.from_dict(
                {
                    "id": DID,
                    "verificationMethod": [
                        {"id": f"{DID}#k", "type": "Ed25519", "publicKeyBase58": "0OIl"}
                    ],
                }
            )

    def test_from_json_invalid(self) -> None:
        with pytest.raises(KeyDecodingError):
            VerificationDocument.from_json("{not json")
