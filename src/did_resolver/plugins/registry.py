"""PluginRegistry — name → class registry with entry-point discovery.

Each registry is bound to a base class; only subclasses of it can be
registered. Third-party packages contribute classes through
``importlib.metadata`` entry points. did-resolver uses one registry of
:class:`~did_resolver.methods.base.ResolutionStrategy` classes under the
``did_resolver.methods`` group.

Example
-------
::

    strategies = PluginRegistry(ResolutionStrategy, "did-methods")

    @strategies.register("example")
    class ExampleStrategy(ResolutionStrategy):
        ...

    strategies.load_entrypoints("did_resolver.methods")
    strategy_class = strategies.get("example")
"""
from __future__ import annotations

import importlib.metadata
import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PluginNotFoundError(KeyError):
    """Raised when a plugin name is not present in a registry."""

    def __init__(self, plugin_name: str, registry_name: str) -> None:
        self.plugin_name = plugin_name
        self.registry_name = registry_name
        super().__init__(f"Plugin {plugin_name!r} is not registered in {registry_name!r}.")


class PluginAlreadyRegisteredError(ValueError):
    """Raised when registering a name that is already taken."""

    def __init__(self, plugin_name: str, registry_name: str) -> None:
        self.plugin_name = plugin_name
        self.registry_name = registry_name
        super().__init__(
            f"Plugin {plugin_name!r} is already registered in {registry_name!r}."
        )


class PluginRegistry(Generic[T]):
    """Registry of classes implementing *base_class*, keyed by name.

    Parameters
    ----------
    base_class:
        Every registered class must be a subclass of this class.
    registry_name:
        Human-readable name used in error messages and ``repr``.
    """

    def __init__(self, base_class: type[T], registry_name: str) -> None:
        self._base_class = base_class
        self._registry_name = registry_name
        self._plugins: dict[str, type[T]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str) -> Callable[[type[T]], type[T]]:
        """Class decorator registering the decorated class under *name*.

        The class is returned unchanged.
        """

        def decorator(cls: type[T]) -> type[T]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[T]) -> None:
        """Register *cls* under *name*.

        Raises
        ------
        TypeError
            If *cls* is not a subclass of the registry's base class.
        PluginAlreadyRegisteredError
            If *name* is already registered.
        """
        if not (isinstance(cls, type) and issubclass(cls, self._base_class)):
            raise TypeError(
                f"{cls!r} must be a subclass of {self._base_class.__name__} "
                f"to be registered in {self._registry_name!r}."
            )
        with self._lock:
            if name in self._plugins:
                raise PluginAlreadyRegisteredError(name, self._registry_name)
            self._plugins[name] = cls
        logger.debug("Registered plugin %r in %r", name, self._registry_name)

    def deregister(self, name: str) -> None:
        """Remove *name* from the registry.

        Raises
        ------
        PluginNotFoundError
            If *name* is not registered.
        """
        with self._lock:
            if name not in self._plugins:
                raise PluginNotFoundError(name, self._registry_name)
            del self._plugins[name]

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, name: str) -> type[T]:
        """Return the class registered under *name*.

        Raises
        ------
        PluginNotFoundError
            If *name* is not registered.
        """
        with self._lock:
            try:
                return self._plugins[name]
            except KeyError:
                raise PluginNotFoundError(name, self._registry_name) from None

    def list_plugins(self) -> list[str]:
        """Return registered names, sorted."""
        with self._lock:
            return sorted(self._plugins)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def load_entrypoints(self, group: str) -> None:
        """Register every class advertised under the entry-point *group*.

        Names already registered are left as they are. Entry points that
        fail to import or do not subclass the base class are logged and
        skipped, so one broken plugin cannot prevent the others loading.
        """
        for entry_point in importlib.metadata.entry_points(group=group):
            if entry_point.name in self:
                logger.debug(
                    "Entry point %r already registered in %r; skipping",
                    entry_point.name,
                    self._registry_name,
                )
                continue
            try:
                cls = entry_point.load()
            except Exception as exc:
                logger.warning("Could not load entry point %r: %s", entry_point.name, exc)
                continue
            try:
                self.register_class(entry_point.name, cls)
            except (TypeError, PluginAlreadyRegisteredError) as exc:
                logger.warning("Ignoring entry point %r: %s", entry_point.name, exc)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._plugins

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)

    def __repr__(self) -> str:
        return (
            f"PluginRegistry(name={self._registry_name!r}, "
            f"base_class={self._base_class.__name__}, plugins={self.list_plugins()})"
        )


__all__ = ["PluginAlreadyRegisteredError", "PluginNotFoundError", "PluginRegistry"]
