"""did_resolver.methods — resolution strategies, one per DID method.

Importing this package registers the built-in strategies (``key`` and
``keri``) in :data:`strategy_plugins`.
"""
from __future__ import annotations

from did_resolver.methods.base import (
    ENTRYPOINT_GROUP,
    ResolutionStrategy,
    method_specific_id,
    strategy_plugins,
)
from did_resolver.methods.key import DidKeyStrategy, did_key_from_ed25519
from did_resolver.methods.keri import DidKeriStrategy, document_from_state
from did_resolver.methods.store import DocumentAlreadyRegisteredError, DocumentStoreStrategy

__all__ = [
    "ENTRYPOINT_GROUP",
    "DidKeriStrategy",
    "DidKeyStrategy",
    "DocumentAlreadyRegisteredError",
    "DocumentStoreStrategy",
    "ResolutionStrategy",
    "did_key_from_ed25519",
    "document_from_state",
    "method_specific_id",
    "strategy_plugins",
]
