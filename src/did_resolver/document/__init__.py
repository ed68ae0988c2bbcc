"""did_resolver.document — the verification document model and key queries.

Submodules
----------
keys
    Base58Key, MultibaseKey, JwkKey and the KeyMaterial union.
document
    VerificationDocument, VerificationMethod and KeyAgreement.
"""
from __future__ import annotations

from did_resolver.document.document import (
    DID_CONTEXT,
    KeyAgreement,
    VerificationDocument,
    VerificationMethod,
)
from did_resolver.document.keys import Base58Key, JwkKey, KeyMaterial, MultibaseKey

__all__ = [
    "DID_CONTEXT",
    "Base58Key",
    "JwkKey",
    "KeyAgreement",
    "KeyMaterial",
    "MultibaseKey",
    "VerificationDocument",
    "VerificationMethod",
]
