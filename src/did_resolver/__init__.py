"""did-resolver — resolve DID URLs to verification documents.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import did_resolver
>>> did_resolver.__version__
'0.1.0'

Quick start
-----------
::

    from did_resolver import default_registry

    registry = default_registry()
    document = registry.resolve("did:key:z6MkiTBz1ymuepAQ4HEHYSF1H8quG5GLVVQR3djdX3mDooWp")
    signing_key = document.find_public_key_for_curve("Ed25519")
    agreement = document.find_key_agreement("X25519")

    # Never raises; None for anything unresolvable.
    registry.resolve_any("did:unknown:123")
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from did_resolver.errors import (
    ConfigurationError,
    DIDNotFoundError,
    DIDResolutionError,
    KeyDecodingError,
    NotADIDError,
    ReplayRejectedError,
    ResolverError,
    SignatureVerificationError,
    UnsupportedMethodError,
)

# ------------------------------------------------------------------
# DID URLs
# ------------------------------------------------------------------
from did_resolver.url import DIDUrl, DIDUrlParser, canonical_id, decode_kerl, parse

# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------
from did_resolver.document import (
    Base58Key,
    JwkKey,
    KeyAgreement,
    MultibaseKey,
    VerificationDocument,
    VerificationMethod,
)

# ------------------------------------------------------------------
# Key-event logs
# ------------------------------------------------------------------
from did_resolver.keri import (
    EventLogReplayer,
    EventSignatureCheck,
    IdentifierState,
    KeyEvent,
    KeyPrefix,
    parse_event_stream,
    replay,
)

# ------------------------------------------------------------------
# Strategies and dispatch
# ------------------------------------------------------------------
from did_resolver.methods import (
    DidKeriStrategy,
    DidKeyStrategy,
    DocumentStoreStrategy,
    ResolutionStrategy,
    strategy_plugins,
)
from did_resolver.registry import ResolverRegistry, default_registry
from did_resolver.config import ResolverSettings, build_registry, load_settings

__all__ = [
    "__version__",
    # Errors
    "ConfigurationError",
    "DIDNotFoundError",
    "DIDResolutionError",
    "KeyDecodingError",
    "NotADIDError",
    "ReplayRejectedError",
    "ResolverError",
    "SignatureVerificationError",
    "UnsupportedMethodError",
    # DID URLs
    "DIDUrl",
    "DIDUrlParser",
    "canonical_id",
    "decode_kerl",
    "parse",
    # Documents
    "Base58Key",
    "JwkKey",
    "KeyAgreement",
    "MultibaseKey",
    "VerificationDocument",
    "VerificationMethod",
    # Key-event logs
    "EventLogReplayer",
    "EventSignatureCheck",
    "IdentifierState",
    "KeyEvent",
    "KeyPrefix",
    "parse_event_stream",
    "replay",
    # Strategies and dispatch
    "DidKeriStrategy",
    "DidKeyStrategy",
    "DocumentStoreStrategy",
    "ResolutionStrategy",
    "ResolverRegistry",
    "ResolverSettings",
    "build_registry",
    "default_registry",
    "load_settings",
    "strategy_plugins",
]
