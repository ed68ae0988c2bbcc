"""DidKeriStrategy — ``did:keri`` resolution by key-event-log replay.

The key-event log (KERL) travels inside the DID URL as the base64url
``kerl`` query value and reaches the strategy as the side channel. The
log is parsed, optionally signature-checked, replayed, and the current key
set becomes the document's verification methods. The log's identifier
prefix must equal the DID's method-specific identifier.
"""
from __future__ import annotations

import logging

from did_resolver.document import (
    KeyAgreement,
    MultibaseKey,
    VerificationDocument,
    VerificationMethod,
)
from did_resolver.encoding import b58_encode
from did_resolver.errors import DIDResolutionError
from did_resolver.keri.codes import ED25519_CODES, X25519_CODES
from did_resolver.keri.events import parse_event_stream
from did_resolver.keri.state import EventLogReplayer, IdentifierState
from did_resolver.keri.verification import EventSignatureCheck
from did_resolver.methods.base import ResolutionStrategy, method_specific_id, strategy_plugins
from did_resolver.signing import SignatureVerifier

logger = logging.getLogger(__name__)


def document_from_state(did: str, state: IdentifierState) -> VerificationDocument:
    """Build a verification document from a replayed key state.

    Each current key becomes a verification method ``<did>#<key qb64>``.
    Ed25519 keys are listed under ``authentication`` and
    ``assertionMethod``; X25519 keys are embedded in ``keyAgreement``.

    Raises
    ------
    DIDResolutionError
        If the state declares the same key twice.
    """
    methods: list[VerificationMethod] = []
    signing: list[str] = []
    agreement: list[dict[str, str]] = []
    for key in state.current_keys:
        method = VerificationMethod(
            id=f"{did}#{key.qb64}",
            key_type=key.key_type,
            controller=did,
            public_key=MultibaseKey(key.raw),
        )
        methods.append(method)
        if key.code in ED25519_CODES:
            signing.append(method.id)
        elif key.code in X25519_CODES:
            agreement.append(
                KeyAgreement(
                    id=method.id,
                    type=method.key_type,
                    controller=did,
                    public_key_base58=b58_encode(key.raw),
                ).to_dict()
            )

    try:
        return VerificationDocument(
            id=did,
            verification_method=methods,
            authentication=signing or None,
            assertion_method=signing or None,
            key_agreement=agreement or None,
        )
    except ValueError as exc:
        raise DIDResolutionError(f"Cannot build a document for {did!r}: {exc}") from exc


@strategy_plugins.register("keri")
class DidKeriStrategy(ResolutionStrategy):
    """Resolve ``did:keri`` identifiers from an inlined key-event log.

    Parameters
    ----------
    verify_signatures:
        When ``True``, every event must carry enough valid Ed25519
        signatures before it is applied (see
        :class:`~did_resolver.keri.verification.EventSignatureCheck`).
    verifier:
        Signature primitive for the check. Defaults to
        :class:`~did_resolver.signing.Ed25519Verifier`.

    Example
    -------
    ::

        strategy = DidKeriStrategy()
        document = strategy.resolve(f"did:keri:{prefix}", kerl_bytes)
    """

    method = "keri"

    def __init__(
        self,
        verify_signatures: bool = False,
        verifier: SignatureVerifier | None = None,
    ) -> None:
        self._verify_signatures = verify_signatures
        hook = EventSignatureCheck(verifier) if verify_signatures else None
        self._replayer = EventLogReplayer(pre_apply=hook)

    @property
    def verify_signatures(self) -> bool:
        return self._verify_signatures

    def resolve(self, did: str, side_channel: bytes | None = None) -> VerificationDocument:
        """Replay *side_channel* and build the document for *did*.

        Raises
        ------
        DIDResolutionError
            If no log was supplied, the log is empty, its prefix does not
            match *did*, or (with signature checks on) an event is not
            adequately signed.
        KeyDecodingError
            If the log is not a well-formed KERI event stream.
        ReplayRejectedError
            If an event breaks the ordering or predecessor-digest rule.
        """
        try:
            prefix = method_specific_id(did, self.method)
        except ValueError as exc:
            raise DIDResolutionError(str(exc)) from exc
        if not side_channel:
            raise DIDResolutionError(f"kerl not found for {did!r}.")

        events = parse_event_stream(side_channel)
        if not events:
            raise DIDResolutionError(f"The key-event log for {did!r} is empty.")

        state = self._replayer.replay(events)
        if state.prefix != prefix:
            raise DIDResolutionError(
                f"Key-event log belongs to {state.prefix!r}, not {prefix!r}."
            )

        logger.info(
            "Resolved %s at sequence number %d with %d current key(s)",
            did,
            state.sequence_number,
            len(state.current_keys),
        )
        return document_from_state(did, state)

    def __repr__(self) -> str:
        return f"DidKeriStrategy(verify_signatures={self._verify_signatures!r})"


__all__ = ["DidKeriStrategy", "document_from_state"]
