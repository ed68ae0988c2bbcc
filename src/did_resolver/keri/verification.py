"""Event signature checks, usable as an :class:`EventLogReplayer` pre-apply hook.

An inception is signed by the keys it declares, since nothing precedes it.
Every later event, rotation included, must be signed by the key set in
force before it: the keys and threshold of the last establishment event.
An event is accepted when at least ``threshold`` distinct key indexes carry
a valid Ed25519 signature over the event body. Keys of other types never
count.
"""
from __future__ import annotations

import logging

from did_resolver.errors import SignatureVerificationError
from did_resolver.keri.codes import ED25519_CODES
from did_resolver.keri.events import EventType, IndexedSignature, KeyEvent
from did_resolver.keri.state import IdentifierState
from did_resolver.signing import Ed25519Verifier, SignatureVerifier, sign_ed25519

logger = logging.getLogger(__name__)


class EventSignatureCheck:
    """Callable pre-apply hook that enforces event signature thresholds.

    Parameters
    ----------
    verifier:
        The ``verify(public_key, signature, data) -> bool`` primitive.
        Defaults to :class:`~did_resolver.signing.Ed25519Verifier`.
    """

    def __init__(self, verifier: SignatureVerifier | None = None) -> None:
        self._verifier: SignatureVerifier = verifier or Ed25519Verifier()

    def __call__(self, event: KeyEvent, state: IdentifierState) -> None:
        """Raise :class:`SignatureVerificationError` unless *event* meets its threshold.

        *state* is the state before *event* is applied.
        """
        if event.event_type is EventType.INCEPTION:
            keys, threshold = event.keys, event.threshold
        else:
            keys, threshold = state.current_keys, state.threshold

        valid_indexes: set[int] = set()
        for signature in event.signatures:
            if signature.index >= len(keys):
                logger.debug(
                    "Event %d signature index %d is out of range",
                    event.sequence_number,
                    signature.index,
                )
                continue
            key = keys[signature.index]
            if key.code not in ED25519_CODES:
                continue
            if self._verifier.verify(key.raw, signature.raw, event.raw):
                valid_indexes.add(signature.index)

        if len(valid_indexes) < max(threshold, 1):
            raise SignatureVerificationError(
                event.sequence_number,
                f"{len(valid_indexes)} valid signature(s), threshold is {threshold}",
            )


def sign_event(event: KeyEvent, *signers: tuple[int, bytes]) -> KeyEvent:
    """Return *event* carrying one Ed25519 signature per ``(index, private_key)`` pair.

    *index* is the position of the signing key in the key list the event
    is checked against. Existing signatures are replaced.

    Example
    -------
    ::

        inception = sign_event(KeyEvent.inception([key]), (0, private_key))
    """
    return event.with_signatures(
        IndexedSignature(index, sign_ed25519(private_key, event.raw))
        for index, private_key in signers
    )


__all__ = ["EventSignatureCheck", "sign_event"]
