#!/usr/bin/env python3
"""Example: KERI key rotation

Builds a signed key-event log (inception then rotation), replays it, and
resolves the identifier with the log inlined as the ``kerl`` query value.

Usage:
    python examples/02_keri_replay.py

Requirements:
    pip install did-resolver
"""
from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from did_resolver import (
    DidKeriStrategy,
    KeyEvent,
    KeyPrefix,
    ResolverRegistry,
    parse_event_stream,
    replay,
)
from did_resolver.encoding import b64url_encode
from did_resolver.keri import digest, serialize_event_stream, sign_event


def main() -> None:
    first_private = Ed25519PrivateKey.generate()
    second_private = Ed25519PrivateKey.generate()
    first = KeyPrefix(
        code="D", raw=first_private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    )
    second = KeyPrefix(
        code="D", raw=second_private.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    )
    first_seed = first_private.private_bytes_raw()

    # Step 1: Incept with the first key, committing to the second
    inception = KeyEvent.inception([first], next_keys_digest=digest(second.qb64.encode()))
    inception = sign_event(inception, (0, first_seed))

    # Step 2: Rotate to the second key, signed by the key being replaced
    rotation = KeyEvent.rotation(
        prefix=first.qb64,
        sequence_number=1,
        prior_digest=inception.digest(),
        keys=[second],
    )
    rotation = sign_event(rotation, (0, first_seed))
    kerl = serialize_event_stream([inception, rotation])
    print(f"Key-event log: {len(kerl)} bytes")

    # Step 3: Replay locally
    state = replay(parse_event_stream(kerl))
    print(f"Prefix {state.prefix} at sequence number {state.sequence_number}")
    print(f"Current key: {state.current_keys[0].qb64}")

    # Step 4: Resolve through a registry that checks signatures
    registry = ResolverRegistry()
    registry.register(DidKeriStrategy(verify_signatures=True))
    document = registry.resolve(f"did:keri:{first.qb64}?kerl={b64url_encode(kerl)}")
    print(f"Verification methods: {[vm.id.split('#')[1] for vm in document.verification_method]}")


if __name__ == "__main__":
    main()
