"""Tests for did_resolver.keri.verification — EventSignatureCheck."""
from __future__ import annotations

from typing import Callable

import pytest

from did_resolver.errors import SignatureVerificationError
from did_resolver.keri import (
    EventLogReplayer,
    EventSignatureCheck,
    KeyEvent,
    KeyPrefix,
    sign_event,
)
from did_resolver.keri.events import IndexedSignature
from did_resolver.signing import Ed25519Verifier, sign_ed25519

Signer = Callable[..., KeyEvent]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def replayer() -> EventLogReplayer:
    return EventLogReplayer(pre_apply=EventSignatureCheck())


@pytest.fixture()
def inception(prefixes: list[KeyPrefix]) -> KeyEvent:
    return KeyEvent.inception([prefixes[0]])


# ---------------------------------------------------------------------------
# Signed logs
# ---------------------------------------------------------------------------


class TestSignedLogs:
    def test_signed_inception_accepted(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        signed = sign(inception, (0, keypairs[0][0]))
        assert replayer.replay([signed]).sequence_number == 0

    def test_rotation_signed_by_prior_keys(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        prefixes: list[KeyPrefix],
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        rotation = KeyEvent.rotation(inception.prefix, 1, inception.digest(), [prefixes[1]])
        interaction = KeyEvent.interaction(inception.prefix, 2, rotation.digest())
        events = [
            sign(inception, (0, keypairs[0][0])),
            sign(rotation, (0, keypairs[0][0])),
            sign(interaction, (0, keypairs[1][0])),
        ]
        state = replayer.replay(events)
        assert state.sequence_number == 2
        assert state.current_keys == (prefixes[1],)

    def test_rotation_signed_only_by_its_new_keys_rejected(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        prefixes: list[KeyPrefix],
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        takeover = KeyEvent.rotation(inception.prefix, 1, inception.digest(), [prefixes[2]])
        events = [sign(inception, (0, keypairs[0][0])), sign(takeover, (0, keypairs[2][0]))]
        with pytest.raises(SignatureVerificationError) as excinfo:
            replayer.replay(events)
        assert excinfo.value.sequence_number == 1

    def test_rotation_needs_prior_threshold(
        self,
        replayer: EventLogReplayer,
        prefixes: list[KeyPrefix],
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        inception = KeyEvent.inception(prefixes[:2], threshold=2)
        rotation = KeyEvent.rotation(inception.prefix, 1, inception.digest(), [prefixes[2]])
        signed_inception = sign(inception, (0, keypairs[0][0]), (1, keypairs[1][0]))
        with pytest.raises(SignatureVerificationError, match="threshold is 2"):
            replayer.replay([signed_inception, sign(rotation, (0, keypairs[0][0]))])

        both = sign(rotation, (0, keypairs[0][0]), (1, keypairs[1][0]))
        assert replayer.replay([signed_inception, both]).current_keys == (prefixes[2],)

    def test_interaction_signed_by_superseded_key_rejected(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        prefixes: list[KeyPrefix],
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        rotation = KeyEvent.rotation(inception.prefix, 1, inception.digest(), [prefixes[1]])
        interaction = KeyEvent.interaction(inception.prefix, 2, rotation.digest())
        events = [
            sign(inception, (0, keypairs[0][0])),
            sign(rotation, (0, keypairs[0][0])),
            sign(interaction, (0, keypairs[0][0])),
        ]
        with pytest.raises(SignatureVerificationError) as excinfo:
            replayer.replay(events)
        assert excinfo.value.sequence_number == 2


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


class TestRejections:
    def test_unsigned_event_rejected(
        self, replayer: EventLogReplayer, inception: KeyEvent
    ) -> None:
        with pytest.raises(SignatureVerificationError):
            replayer.replay([inception])

    def test_signature_by_wrong_key_rejected(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        with pytest.raises(SignatureVerificationError):
            replayer.replay([sign(inception, (0, keypairs[2][0]))])

    def test_out_of_range_index_ignored(
        self,
        replayer: EventLogReplayer,
        inception: KeyEvent,
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        with pytest.raises(SignatureVerificationError):
            replayer.replay([sign(inception, (5, keypairs[0][0]))])

    def test_threshold_counts_distinct_keys(
        self,
        replayer: EventLogReplayer,
        prefixes: list[KeyPrefix],
        keypairs: list[tuple[bytes, bytes]],
        sign: Signer,
    ) -> None:
        inception = KeyEvent.inception(prefixes[:2], threshold=2)
        duplicated = sign(inception, (0, keypairs[0][0]), (0, keypairs[0][0]))
        with pytest.raises(SignatureVerificationError, match="threshold is 2"):
            replayer.replay([duplicated])

        both = sign(inception, (0, keypairs[0][0]), (1, keypairs[1][0]))
        assert replayer.replay([both]).threshold == 2

    def test_non_ed25519_keys_never_count(self, replayer: EventLogReplayer) -> None:
        x25519 = KeyPrefix(code="C", raw=bytes(32))
        inception = KeyEvent.inception([x25519])
        with pytest.raises(SignatureVerificationError):
            replayer.replay([inception])

    def test_custom_verifier_is_used(self, inception: KeyEvent) -> None:
        class AcceptAll(Ed25519Verifier):
            def verify(self, public_key_bytes: bytes, signature: bytes, data: bytes) -> bool:
                return True

        replayer = EventLogReplayer(pre_apply=EventSignatureCheck(AcceptAll()))
        signed = inception.with_signatures([IndexedSignature(0, bytes(64))])
        assert replayer.replay([signed]).sequence_number == 0


class TestSigningPrimitives:
    def test_sign_and_verify(self, keypairs: list[tuple[bytes, bytes]]) -> None:
        private_key, public_key = keypairs[0]
        signature = sign_ed25519(private_key, b"payload")
        assert len(signature) == 64
        assert Ed25519Verifier().verify(public_key, signature, b"payload")
        assert not Ed25519Verifier().verify(public_key, signature, b"tampered")

    def test_invalid_public_key_bytes(self) -> None:
        assert Ed25519Verifier().verify(b"short", bytes(64), b"payload") is False

    def test_sign_event_replaces_signatures(
        self, inception: KeyEvent, keypairs: list[tuple[bytes, bytes]]
    ) -> None:
        placeholder = inception.with_signatures([IndexedSignature(3, bytes(64))])
        signed = sign_event(placeholder, (0, keypairs[0][0]))
        assert [signature.index for signature in signed.signatures] == [0]
        assert Ed25519Verifier().verify(
            keypairs[0][1], signed.signatures[0].raw, inception.raw
        )
