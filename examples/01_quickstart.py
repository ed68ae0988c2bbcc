#!/usr/bin/env python3
"""Example: Quickstart

Resolves a did:key DID with the built-in registry and looks up its
signing and key-agreement keys.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install did-resolver
"""
from __future__ import annotations

import did_resolver
from did_resolver import default_registry
from did_resolver.encoding import b58_encode

DID_KEY = "did:key:z6MkiTBz1ymuepAQ4HEHYSF1H8quG5GLVVQR3djdX3mDooWp"


def main() -> None:
    print(f"did-resolver version: {did_resolver.__version__}")

    # Step 1: Build a registry with the did:key and did:keri strategies
    registry = default_registry()
    print(f"Supported methods: {registry.methods()}")

    # Step 2: Resolve; fragments and queries are stripped before dispatch
    document = registry.resolve(f"{DID_KEY}#signing")
    print(f"Resolved: {document.id}")
    for method in document.verification_method:
        print(f"  {method.key_type}: {method.id[-20:]}")

    # Step 3: Look up keys by curve
    ed25519 = document.find_public_key_for_curve("Ed25519")
    x25519 = document.find_public_key_for_curve("X25519")
    print(f"Ed25519 key: {b58_encode(ed25519) if ed25519 else None}")
    print(f"X25519 key:  {b58_encode(x25519) if x25519 else None}")

    # Step 4: resolve_any never raises
    print(f"resolve_any('not a did') -> {registry.resolve_any('not a did')}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
