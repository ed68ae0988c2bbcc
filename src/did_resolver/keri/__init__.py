"""did_resolver.keri — key-event log parsing and replay.

Submodules
----------
codes
    Derivation codes, KeyPrefix, key-type labels and self-addressing digests.
events
    KeyEvent, IndexedSignature and the KERL stream codec.
state
    IdentifierState, EventLogReplayer and replay().
verification
    EventSignatureCheck, an optional pre-apply signature hook, and sign_event.

Quick start
-----------
::

    from did_resolver.keri import parse_event_stream, replay

    state = replay(parse_event_stream(kerl_bytes))
    for key in state.current_keys:
        print(key.key_type, key.qb64)
"""
from __future__ import annotations

from did_resolver.keri.codes import (
    UNKNOWN_KEY_TYPE,
    KeyPrefix,
    digest,
    key_type_for,
    verify_digest,
)
from did_resolver.keri.events import (
    EventType,
    IndexedSignature,
    KeyEvent,
    parse_event_stream,
    serialize_event_stream,
)
from did_resolver.keri.state import EventLogReplayer, IdentifierState, replay
from did_resolver.keri.verification import EventSignatureCheck, sign_event

__all__ = [
    "UNKNOWN_KEY_TYPE",
    "EventLogReplayer",
    "EventSignatureCheck",
    "EventType",
    "IdentifierState",
    "IndexedSignature",
    "KeyEvent",
    "KeyPrefix",
    "digest",
    "key_type_for",
    "parse_event_stream",
    "replay",
    "serialize_event_stream",
    "sign_event",
    "verify_digest",
]
