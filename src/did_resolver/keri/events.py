"""Key events and the KERI event-stream codec.

Wire format
-----------
A key-event log (KERL) is a byte stream of events, each a JSON object
immediately followed by its attachments::

    {"v":"KERI10JSON0000e6_","i":"D...","s":"0","t":"icp","kt":"1","k":["D..."],"n":"E...",...}-AABAA<sig>
    {"v":"KERI10JSON000122_","i":"D...","s":"1","t":"rot","p":"E...","kt":"1","k":["D..."],...}-AABAA<sig>

The version string ``KERI10JSON<size>_`` gives the exact byte length of the
JSON body in hex; that byte range is what digests and signatures cover.
Sequence numbers (``s``) and thresholds (``kt``) are hex strings.

Attachments are read for indexed Ed25519 signature groups only:
``-A`` + a two-character base64 count, then ``count`` signatures of the
form ``A`` + base64 index character + 86 base64url characters. Other
attachment groups are skipped.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Sequence

from did_resolver.encoding import b64url_decode, b64url_encode
from did_resolver.errors import KeyDecodingError
from did_resolver.keri.codes import DEFAULT_DIGEST_CODE, KeyPrefix, digest

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(rb'"v":"KERI(?P<major>[0-9a-f])(?P<minor>[0-9a-f])JSON(?P<size>[0-9a-f]{6})_"')
_VERSION_TEMPLATE = "KERI10JSON{size:06x}_"
# The version string sits at the very start of the body.
_VERSION_SEARCH_WINDOW = 32

_B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
_SIGNATURE_GROUP = "-A"
_SIGNATURE_CODE = "A"
_SIGNATURE_LENGTH = 88


class EventType(str, Enum):
    """The three kinds of key event the replayer understands."""

    INCEPTION = "icp"
    ROTATION = "rot"
    INTERACTION = "ixn"

    @property
    def is_establishment(self) -> bool:
        """Inception and rotation establish a key set; interaction does not."""
        return self is not EventType.INTERACTION


# Delegated inception / rotation carry the same key semantics.
_EVENT_TYPE_ALIASES: dict[str, EventType] = {
    "icp": EventType.INCEPTION,
    "dip": EventType.INCEPTION,
    "rot": EventType.ROTATION,
    "drt": EventType.ROTATION,
    "ixn": EventType.INTERACTION,
}


def _b64_index(text: str) -> int:
    value = 0
    for char in text:
        position = _B64_ALPHABET.find(char)
        if position < 0:
            raise KeyDecodingError(f"Invalid base64 count character {char!r}.")
        value = value * 64 + position
    return value


def _b64_chars(value: int, width: int) -> str:
    chars = []
    for _ in range(width):
        value, remainder = divmod(value, 64)
        chars.append(_B64_ALPHABET[remainder])
    return "".join(reversed(chars))


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexedSignature:
    """An Ed25519 signature tagged with the index of the signing key.

    Parameters
    ----------
    index:
        Position of the signing key in the relevant key list.
    raw:
        The 64-byte signature.
    """

    index: int
    raw: bytes

    @property
    def qb64(self) -> str:
        return _SIGNATURE_CODE + _b64_chars(self.index, 1) + b64url_encode(self.raw)

    @classmethod
    def from_qb64(cls, qb64: str) -> "IndexedSignature":
        if len(qb64) != _SIGNATURE_LENGTH or not qb64.startswith(_SIGNATURE_CODE):
            raise KeyDecodingError(f"Malformed indexed signature {qb64!r}.")
        return cls(index=_b64_index(qb64[1]), raw=b64url_decode(qb64[2:]))


def parse_attachments(text: str) -> tuple[IndexedSignature, ...]:
    """Extract indexed signatures from an attachment string.

    Raises
    ------
    KeyDecodingError
        If a signature group is truncated or malformed.
    """
    signatures: list[IndexedSignature] = []
    remaining = text.strip()
    while remaining:
        if not remaining.startswith(_SIGNATURE_GROUP):
            logger.debug("Skipping unsupported attachment group %r", remaining[:4])
            break
        count = _b64_index(remaining[2:4])
        remaining = remaining[4:]
        for _ in range(count):
            chunk = remaining[:_SIGNATURE_LENGTH]
            signatures.append(IndexedSignature.from_qb64(chunk))
            remaining = remaining[_SIGNATURE_LENGTH:]
        remaining = remaining.strip()
    return tuple(signatures)


def render_attachments(signatures: Sequence[IndexedSignature]) -> str:
    """Render *signatures* as a single ``-A`` attachment group."""
    if not signatures:
        return ""
    return _SIGNATURE_GROUP + _b64_chars(len(signatures), 2) + "".join(
        signature.qb64 for signature in signatures
    )


# ---------------------------------------------------------------------------
# KeyEvent
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyEvent:
    """A single parsed key event.

    Parameters
    ----------
    event_type:
        Inception, rotation or interaction.
    prefix:
        The identifier prefix (``i``) the event belongs to.
    sequence_number:
        Position of the event in the log, starting at 0.
    prior_digest:
        Self-addressing digest of the previous event (``p``). ``None`` for
        inception.
    keys:
        The new current key list. Empty for interaction events.
    next_keys_digest:
        Commitment to the next key set (``n``). Carried, not enforced.
    threshold:
        Number of signatures required (``kt``), between 1 and the number of
        keys. Always 1 for interaction events.
    raw:
        The exact serialized JSON body. Digests and signatures cover it.
    signatures:
        Indexed signatures attached to the event.
    """

    event_type: EventType
    prefix: str
    sequence_number: int
    raw: bytes
    prior_digest: str | None = None
    keys: tuple[KeyPrefix, ...] = ()
    next_keys_digest: str | None = None
    threshold: int = 1
    signatures: tuple[IndexedSignature, ...] = field(default=(), compare=False)

    def digest(self, code: str = DEFAULT_DIGEST_CODE) -> str:
        """Return the self-addressing digest of this event's serialized body."""
        return digest(self.raw, code)

    def with_signatures(self, signatures: Iterable[IndexedSignature]) -> "KeyEvent":
        """Return a copy of this event carrying *signatures*."""
        return replace(self, signatures=tuple(signatures))

    def to_bytes(self) -> bytes:
        """Return the body followed by its signature attachments."""
        return self.raw + render_attachments(self.signatures).encode("ascii")

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def from_json(
        cls, raw: bytes, signatures: Sequence[IndexedSignature] = ()
    ) -> "KeyEvent":
        """Parse one serialized event body.

        Raises
        ------
        KeyDecodingError
            If the body is not JSON, has an unknown event type, or lacks a
            required field.
        """
        try:
            body: Any = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise KeyDecodingError(f"Key event is not valid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise KeyDecodingError("Key event body must be a JSON object.")

        try:
            event_type = _EVENT_TYPE_ALIASES[body["t"]]
            prefix = str(body["i"])
            sequence_number = int(body["s"], 16)
        except KeyError as exc:
            raise KeyDecodingError(f"Key event is missing or has an unknown {exc}.") from exc
        except (TypeError, ValueError) as exc:
            raise KeyDecodingError(f"Key event sequence number is not hex: {exc}") from exc

        keys: tuple[KeyPrefix, ...] = ()
        threshold = 1
        if event_type.is_establishment:
            raw_keys = body.get("k")
            if not isinstance(raw_keys, list):
                raise KeyDecodingError(
                    f"Establishment event {sequence_number} has no key list."
                )
            if not all(isinstance(key, str) for key in raw_keys):
                raise KeyDecodingError(
                    f"Establishment event {sequence_number} has a non-string key."
                )
            keys = tuple(KeyPrefix.from_qb64(key) for key in raw_keys)
            threshold = _parse_threshold(body.get("kt"), len(keys))

        return cls(
            event_type=event_type,
            prefix=prefix,
            sequence_number=sequence_number,
            raw=bytes(raw),
            prior_digest=_optional_str(body, "p", sequence_number),
            keys=keys,
            next_keys_digest=_optional_str(body, "n", sequence_number),
            threshold=threshold,
            signatures=tuple(signatures),
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def inception(
        cls,
        keys: Sequence[KeyPrefix],
        next_keys_digest: str = "",
        prefix: str | None = None,
        threshold: int = 1,
    ) -> "KeyEvent":
        """Build an inception event. The prefix defaults to the first key (basic prefix)."""
        if prefix is None:
            if not keys:
                raise ValueError("An inception event without keys needs an explicit prefix.")
            prefix = keys[0].qb64
        body: dict[str, object] = {
            "i": prefix,
            "s": "0",
            "t": EventType.INCEPTION.value,
            "kt": format(threshold, "x"),
            "k": [key.qb64 for key in keys],
            "n": next_keys_digest,
            "wt": "0",
            "w": [],
            "c": [],
        }
        return cls.from_json(_serialize(body))

    @classmethod
    def rotation(
        cls,
        prefix: str,
        sequence_number: int,
        prior_digest: str,
        keys: Sequence[KeyPrefix],
        next_keys_digest: str = "",
        threshold: int = 1,
    ) -> "KeyEvent":
        """Build a rotation event replacing the current keys with *keys*."""
        body: dict[str, object] = {
            "i": prefix,
            "s": format(sequence_number, "x"),
            "t": EventType.ROTATION.value,
            "p": prior_digest,
            "kt": format(threshold, "x"),
            "k": [key.qb64 for key in keys],
            "n": next_keys_digest,
            "wt": "0",
            "wr": [],
            "wa": [],
            "a": [],
        }
        return cls.from_json(_serialize(body))

    @classmethod
    def interaction(
        cls,
        prefix: str,
        sequence_number: int,
        prior_digest: str,
        anchors: Sequence[dict[str, object]] = (),
    ) -> "KeyEvent":
        """Build an interaction event anchoring *anchors*. Keys are unaffected."""
        body: dict[str, object] = {
            "i": prefix,
            "s": format(sequence_number, "x"),
            "t": EventType.INTERACTION.value,
            "p": prior_digest,
            "a": list(anchors),
        }
        return cls.from_json(_serialize(body))


def _optional_str(body: dict[str, Any], name: str, sequence_number: int) -> str | None:
    value = body.get(name)
    if value is not None and not isinstance(value, str):
        raise KeyDecodingError(
            f"Key event {sequence_number} field {name!r} must be a string, "
            f"got {type(value).__name__}."
        )
    return value


def _parse_threshold(value: Any, key_count: int) -> int:
    """Return the signing threshold, between 1 and the number of keys.

    Raises
    ------
    KeyDecodingError
        If the threshold is not hex, is below 1, or exceeds *key_count*.
    """
    # Weighted thresholds are not evaluated; require every key to sign.
    if isinstance(value, list):
        return max(key_count, 1)
    if value is None:
        threshold = 1
    elif isinstance(value, str):
        try:
            threshold = int(value, 16)
        except ValueError as exc:
            raise KeyDecodingError(f"Signing threshold {value!r} is not hex.") from exc
    else:
        raise KeyDecodingError(f"Signing threshold {value!r} is not a hex string.")
    if threshold < 1:
        raise KeyDecodingError(f"Signing threshold {value!r} must be at least 1.")
    if key_count and threshold > key_count:
        raise KeyDecodingError(
            f"Signing threshold {threshold} exceeds the {key_count} declared key(s)."
        )
    return threshold


def _serialize(body: dict[str, object]) -> bytes:
    """Serialize *body* with a version string declaring its exact size."""
    placeholder = {"v": _VERSION_TEMPLATE.format(size=0), **body}
    size = len(json.dumps(placeholder, separators=(",", ":")).encode("utf-8"))
    versioned = {"v": _VERSION_TEMPLATE.format(size=size), **body}
    return json.dumps(versioned, separators=(",", ":")).encode("utf-8")


# ---------------------------------------------------------------------------
# Stream codec
# ---------------------------------------------------------------------------


def parse_event_stream(data: bytes | str) -> list[KeyEvent]:
    """Split a KERL byte stream into events, in stream order.

    Parameters
    ----------
    data:
        Concatenated events and attachments. ``str`` input is UTF-8 encoded.

    Returns
    -------
    list[KeyEvent]
        The parsed events. An empty or whitespace-only stream yields ``[]``.

    Raises
    ------
    KeyDecodingError
        If an event lacks a version string, is truncated, or is malformed.
    """
    stream = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    events: list[KeyEvent] = []
    position = 0
    length = len(stream)

    while True:
        while position < length and stream[position : position + 1].isspace():
            position += 1
        if position >= length:
            break
        if stream[position : position + 1] != b"{":
            raise KeyDecodingError(f"Expected a key event at byte {position}.")

        version = _VERSION_PATTERN.search(stream, position, position + _VERSION_SEARCH_WINDOW)
        if version is None:
            raise KeyDecodingError(f"Key event at byte {position} has no KERI version string.")
        size = int(version.group("size"), 16)
        end = position + size
        if end > length:
            raise KeyDecodingError(
                f"Key event at byte {position} declares {size} bytes but the stream is truncated."
            )
        body = stream[position:end]

        next_event = stream.find(b"{", end)
        attachment_end = length if next_event < 0 else next_event
        try:
            attachments = stream[end:attachment_end].decode("ascii")
        except UnicodeDecodeError as exc:
            raise KeyDecodingError(f"Non-ASCII attachment after byte {end}.") from exc

        events.append(KeyEvent.from_json(body, parse_attachments(attachments)))
        position = attachment_end

    logger.debug("Parsed %d key event(s) from a %d-byte stream", len(events), length)
    return events


def serialize_event_stream(events: Iterable[KeyEvent]) -> bytes:
    """Concatenate *events* and their attachments into a KERL byte stream."""
    return b"".join(event.to_bytes() for event in events)


__all__ = [
    "EventType",
    "IndexedSignature",
    "KeyEvent",
    "parse_attachments",
    "parse_event_stream",
    "render_attachments",
    "serialize_event_stream",
]
