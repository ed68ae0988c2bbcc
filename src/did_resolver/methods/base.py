"""ResolutionStrategy — the single capability every DID method implements.

A strategy turns a canonical DID (``did:<method>:<identifier>``) plus an
optional side-channel payload into a :class:`VerificationDocument`.
Concrete strategies register themselves in :data:`strategy_plugins`;
third-party packages advertise theirs under the ``did_resolver.methods``
entry-point group.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from did_resolver.document import VerificationDocument
from did_resolver.plugins.registry import PluginRegistry

ENTRYPOINT_GROUP: str = "did_resolver.methods"


class ResolutionStrategy(ABC):
    """Abstract base for per-method resolvers.

    Subclasses set :attr:`method` and implement :meth:`resolve`. Failures
    are reported as :class:`~did_resolver.errors.DIDResolutionError` (or a
    subclass); anything that needs storage or network access happens
    inside the strategy.
    """

    method: ClassVar[str] = ""

    @abstractmethod
    def resolve(self, did: str, side_channel: bytes | None = None) -> VerificationDocument:
        """Resolve *did* to a verification document.

        Parameters
        ----------
        did:
            The canonical DID, with query and fragment stripped.
        side_channel:
            Method-specific auxiliary bytes decoded from the DID URL, such
            as an inlined key-event log.

        Returns
        -------
        VerificationDocument
            A freshly built document; never cached.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(method={self.method!r})"


#: Built-in and discovered strategy classes, keyed by DID method name.
strategy_plugins: PluginRegistry[ResolutionStrategy] = PluginRegistry(
    ResolutionStrategy, "did-methods"
)


def method_specific_id(did: str, method: str) -> str:
    """Return the identifier part of ``did:<method>:<identifier>``.

    Raises
    ------
    ValueError
        If *did* does not belong to *method*.
    """
    prefix = f"did:{method}:"
    if not did.startswith(prefix) or len(did) == len(prefix):
        raise ValueError(f"{did!r} is not a did:{method} identifier.")
    return did[len(prefix):]


__all__ = [
    "ENTRYPOINT_GROUP",
    "ResolutionStrategy",
    "method_specific_id",
    "strategy_plugins",
]
