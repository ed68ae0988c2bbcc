"""Exception hierarchy for did-resolver.

Every error raised by the package derives from :class:`ResolverError` so
callers can catch the whole family in one clause. "Key not found" is never
an error: document queries return ``None`` instead.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from did_resolver.keri.state import IdentifierState


class ResolverError(Exception):
    """Base exception for did-resolver errors."""


class NotADIDError(ResolverError, ValueError):
    """Raised when a string is not a syntactically valid DID URL."""

    def __init__(self, raw: str, detail: str = "") -> None:
        self.raw = raw
        message = f"{raw!r} is not a DID URL."
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)


class UnsupportedMethodError(ResolverError, LookupError):
    """Raised when no resolution strategy is registered for a DID method."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"No resolution strategy registered for DID method {method!r}.")


class DIDResolutionError(ResolverError):
    """Raised by a resolution strategy that cannot produce a document."""


class DIDNotFoundError(DIDResolutionError):
    """Raised when a document store holds no document for a DID."""

    def __init__(self, did: str) -> None:
        self.did = did
        super().__init__(f"DID {did!r} is not registered in this document store.")


class SignatureVerificationError(DIDResolutionError):
    """Raised when a key event does not carry enough valid signatures."""

    def __init__(self, sequence_number: int, detail: str) -> None:
        self.sequence_number = sequence_number
        super().__init__(f"Signature check failed for event {sequence_number}: {detail}")


class ReplayRejectedError(ResolverError):
    """Raised when a key event fails the ordering or predecessor-digest check.

    Parameters
    ----------
    sequence_number:
        The sequence number declared by the rejected event.
    reason:
        Human-readable explanation of the failed check.
    state:
        The last successfully applied state. Replay stops here; prior
        progress is preserved rather than discarded.
    """

    def __init__(self, sequence_number: int, reason: str, state: "IdentifierState") -> None:
        self.sequence_number = sequence_number
        self.reason = reason
        self.state = state
        super().__init__(f"Key event {sequence_number} rejected: {reason}")


class KeyDecodingError(ResolverError, ValueError):
    """Raised for corrupt input: malformed base encodings, key bytes or event streams."""


class ConfigurationError(ResolverError, ValueError):
    """Raised when resolver settings cannot be loaded or applied."""


__all__ = [
    "ConfigurationError",
    "DIDNotFoundError",
    "DIDResolutionError",
    "KeyDecodingError",
    "NotADIDError",
    "ReplayRejectedError",
    "ResolverError",
    "SignatureVerificationError",
    "UnsupportedMethodError",
]
