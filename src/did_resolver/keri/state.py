"""IdentifierState and EventLogReplayer — deriving current keys from a key-event log.

Transition rule
---------------
An event is accepted iff

1. its sequence number is exactly ``state.sequence_number + 1``;
2. the event at sequence 0 is an inception and no later event is;
3. after inception, its prefix equals the identifier's prefix and its
   prior digest is the self-addressing digest of the last applied event.

Inception and rotation replace the current keys; interaction only
advances the sequence number and the last-event digest.

A rejected event leaves the state untouched and raises
:class:`~did_resolver.errors.ReplayRejectedError`, which carries the last
good state. Signature checks are not part of the rule: they belong to a
``pre_apply`` hook (see :mod:`did_resolver.keri.verification`).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from did_resolver.errors import ReplayRejectedError
from did_resolver.keri.codes import KeyPrefix, verify_digest
from did_resolver.keri.events import EventType, KeyEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentifierState:
    """Key state of an identifier as of the last applied event.

    The zero state (all defaults) precedes inception.

    Parameters
    ----------
    prefix:
        The identifier prefix, set by inception.
    sequence_number:
        Sequence number of the last applied event, ``-1`` before inception.
    last_digest:
        Blake3 self-addressing digest of the last applied event.
    last_event:
        Serialized body of the last applied event.
    current_keys:
        Keys declared by the most recent inception or rotation.
    next_keys_digest:
        The most recent next-key commitment.
    threshold:
        Signing threshold declared alongside ``current_keys``.
    """

    prefix: str | None = None
    sequence_number: int = -1
    last_digest: str | None = None
    last_event: bytes | None = None
    current_keys: tuple[KeyPrefix, ...] = ()
    next_keys_digest: str | None = None
    threshold: int = 1

    @property
    def is_incepted(self) -> bool:
        return self.sequence_number >= 0

    def apply(self, event: KeyEvent) -> "IdentifierState":
        """Return the state after *event*, or raise if the event is rejected.

        Raises
        ------
        ReplayRejectedError
            If the event breaks the ordering, prefix or predecessor-digest
            rule. ``self`` is unchanged and attached to the error.
        """
        expected = self.sequence_number + 1
        if event.sequence_number != expected:
            self._reject(
                event,
                f"expected sequence number {expected}, got {event.sequence_number}",
            )

        if not self.is_incepted:
            if event.event_type is not EventType.INCEPTION:
                self._reject(event, "the first event must be an inception")
        else:
            if event.event_type is EventType.INCEPTION:
                self._reject(event, "inception is only valid at sequence number 0")
            if event.prefix != self.prefix:
                self._reject(
                    event, f"prefix {event.prefix!r} does not match {self.prefix!r}"
                )
            if not event.prior_digest or self.last_event is None or not verify_digest(
                event.prior_digest, self.last_event
            ):
                self._reject(event, "prior digest does not match the last applied event")

        if event.event_type.is_establishment:
            return IdentifierState(
                prefix=event.prefix,
                sequence_number=event.sequence_number,
                last_digest=event.digest(),
                last_event=event.raw,
                current_keys=event.keys,
                next_keys_digest=event.next_keys_digest,
                threshold=event.threshold,
            )
        return IdentifierState(
            prefix=self.prefix,
            sequence_number=event.sequence_number,
            last_digest=event.digest(),
            last_event=event.raw,
            current_keys=self.current_keys,
            next_keys_digest=self.next_keys_digest,
            threshold=self.threshold,
        )

    def _reject(self, event: KeyEvent, reason: str) -> None:
        logger.warning("Rejected key event %d: %s", event.sequence_number, reason)
        raise ReplayRejectedError(event.sequence_number, reason, self)


PreApplyHook = Callable[[KeyEvent, IdentifierState], None]


class EventLogReplayer:
    """Folds an ordered sequence of key events into an :class:`IdentifierState`.

    Parameters
    ----------
    pre_apply:
        Optional hook called with ``(event, current_state)`` once the event
        has passed the transition rule and before the state advances. It
        may raise to refuse the event, e.g. when its signatures do not
        verify.

    Example
    -------
    ::

        replayer = EventLogReplayer()
        state = replayer.replay(parse_event_stream(kerl_bytes))
        print([key.key_type for key in state.current_keys])
    """

    def __init__(self, pre_apply: PreApplyHook | None = None) -> None:
        self._pre_apply = pre_apply

    def replay(
        self,
        events: Iterable[KeyEvent],
        state: IdentifierState | None = None,
    ) -> IdentifierState:
        """Apply *events* left to right, starting from *state* (default: zero state).

        Raises
        ------
        ReplayRejectedError
            On the first rejected event. The error's ``state`` is the last
            successfully applied state.
        """
        current = state if state is not None else IdentifierState()
        for event in events:
            candidate = current.apply(event)
            if self._pre_apply is not None:
                self._pre_apply(event, current)
            current = candidate
        logger.debug(
            "Replayed key state for %s up to sequence number %d",
            current.prefix,
            current.sequence_number,
        )
        return current


def replay(events: Iterable[KeyEvent]) -> IdentifierState:
    """Replay *events* from the zero state without any pre-apply checks."""
    return EventLogReplayer().replay(events)


__all__ = [
    "EventLogReplayer",
    "IdentifierState",
    "PreApplyHook",
    "replay",
]
