"""ResolverRegistry — routes DID URLs to the strategy for their method.

Data flow::

    raw URL -> DIDUrlParser -> strategy lookup by method
            -> strategy.resolve(canonical DID, decoded ``kerl``) -> VerificationDocument

Nothing is cached: every call re-derives the document. The strategy table
is protected by a lock so registration may safely race with dispatch.
"""
from __future__ import annotations

import logging
import threading

from did_resolver.document import VerificationDocument
from did_resolver.errors import UnsupportedMethodError
from did_resolver.methods import DidKeriStrategy, DidKeyStrategy
from did_resolver.methods.base import ENTRYPOINT_GROUP, ResolutionStrategy, strategy_plugins
from did_resolver.plugins.registry import PluginAlreadyRegisteredError, PluginRegistry
from did_resolver.url import DIDUrlParser, decode_kerl

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """One resolution strategy per DID method name.

    Parameters
    ----------
    parser:
        The DID URL parser to use. A fresh :class:`DIDUrlParser` by default.

    Example
    -------
    ::

        registry = ResolverRegistry()
        registry.register(DidKeyStrategy())
        document = registry.resolve("did:key:z6Mk...")
        maybe_document = registry.resolve_any("not a did")  # None
    """

    def __init__(self, parser: DIDUrlParser | None = None) -> None:
        self._parser = parser if parser is not None else DIDUrlParser()
        self._strategies: dict[str, ResolutionStrategy] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, strategy: ResolutionStrategy, method: str | None = None) -> None:
        """Register *strategy* for *method* (default: ``strategy.method``).

        Raises
        ------
        ValueError
            If no method name is available.
        PluginAlreadyRegisteredError
            If the method already has a strategy.
        """
        name = method or strategy.method
        if not name:
            raise ValueError(f"{strategy!r} does not declare a DID method.")
        with self._lock:
            if name in self._strategies:
                raise PluginAlreadyRegisteredError(name, "resolver-registry")
            self._strategies[name] = strategy
        logger.info("Registered %r for did:%s", strategy, name)

    def deregister(self, method: str) -> None:
        """Remove the strategy for *method*.

        Raises
        ------
        UnsupportedMethodError
            If *method* has no strategy.
        """
        with self._lock:
            if self._strategies.pop(method, None) is None:
                raise UnsupportedMethodError(method)

    def strategy_for(self, method: str) -> ResolutionStrategy:
        """Return the strategy registered for *method*.

        Raises
        ------
        UnsupportedMethodError
            If *method* has no strategy.
        """
        with self._lock:
            strategy = self._strategies.get(method)
        if strategy is None:
            raise UnsupportedMethodError(method)
        return strategy

    def methods(self) -> list[str]:
        """Return the registered method names, sorted."""
        with self._lock:
            return sorted(self._strategies)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def resolve(self, raw_url: str) -> VerificationDocument:
        """Resolve *raw_url* to a verification document.

        Raises
        ------
        NotADIDError
            If *raw_url* is not a DID URL.
        UnsupportedMethodError
            If no strategy is registered for the URL's method.
        KeyDecodingError
            If the ``kerl`` query value is not base64url.
        Exception
            Whatever the strategy raises, unchanged.
        """
        url = self._parser.parse(raw_url)
        strategy = self.strategy_for(url.method)
        side_channel = decode_kerl(url)
        logger.debug(
            "Dispatching %s to %r (side channel: %s)",
            url.did,
            strategy,
            "none" if side_channel is None else f"{len(side_channel)} bytes",
        )
        return strategy.resolve(url.did, side_channel)

    def resolve_any(self, raw_url: str) -> VerificationDocument | None:
        """Like :meth:`resolve`, but return ``None`` instead of raising."""
        try:
            return self.resolve(raw_url)
        except Exception as exc:
            logger.debug("Could not resolve %r: %s", raw_url, exc)
            return None

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_plugins(
        cls,
        plugins: PluginRegistry[ResolutionStrategy] | None = None,
        load_entrypoints: bool = False,
        parser: DIDUrlParser | None = None,
    ) -> "ResolverRegistry":
        """Build a registry with one default-constructed strategy per plugin.

        Parameters
        ----------
        plugins:
            Strategy classes to instantiate. Defaults to
            :data:`~did_resolver.methods.base.strategy_plugins`.
        load_entrypoints:
            Discover third-party strategies under the
            ``did_resolver.methods`` entry-point group first.
        parser:
            Passed to the new registry.

        Strategies that cannot be constructed without arguments are logged
        and skipped.
        """
        plugins = plugins if plugins is not None else strategy_plugins
        if load_entrypoints:
            plugins.load_entrypoints(ENTRYPOINT_GROUP)
        registry = cls(parser)
        for name in plugins.list_plugins():
            strategy_class = plugins.get(name)
            try:
                strategy = strategy_class()
            except Exception as exc:
                logger.warning("Could not instantiate strategy %r: %s", name, exc)
                continue
            registry.register(strategy, name)
        return registry

    def __contains__(self, method: object) -> bool:
        with self._lock:
            return method in self._strategies

    def __len__(self) -> int:
        with self._lock:
            return len(self._strategies)

    def __repr__(self) -> str:
        return f"ResolverRegistry(methods={self.methods()})"


def default_registry() -> ResolverRegistry:
    """Return a registry holding the built-in ``key`` and ``keri`` strategies."""
    registry = ResolverRegistry()
    registry.register(DidKeyStrategy())
    registry.register(DidKeriStrategy())
    return registry


__all__ = ["ResolverRegistry", "default_registry"]
