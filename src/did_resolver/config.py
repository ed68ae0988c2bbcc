"""Resolver settings and registry construction.

Settings are a JSON object, for example::

    {
        "methods": ["key", "keri"],
        "verify_signatures": true,
        "document_stores": {"example": "documents.ndjson"},
        "log_level": "INFO"
    }

Relative ``document_stores`` paths are taken relative to the settings file.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from did_resolver.errors import ConfigurationError
from did_resolver.methods import DidKeriStrategy, DocumentStoreStrategy, strategy_plugins
from did_resolver.methods.base import ENTRYPOINT_GROUP
from did_resolver.plugins.registry import PluginAlreadyRegisteredError, PluginNotFoundError
from did_resolver.registry import ResolverRegistry

logger = logging.getLogger(__name__)

_METHOD_NAME = re.compile(r"[a-z][a-z0-9]*")
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ResolverSettings(BaseModel):
    """Which strategies a registry carries and how they behave."""

    methods: list[str] = Field(default_factory=lambda: ["key", "keri"])
    document_stores: dict[str, str] = Field(default_factory=dict)
    verify_signatures: bool = False
    load_entrypoints: bool = False
    log_level: str = "WARNING"

    @field_validator("methods")
    @classmethod
    def validate_methods(cls, value: list[str]) -> list[str]:
        for method in value:
            if not _METHOD_NAME.fullmatch(method):
                raise ValueError(f"{method!r} is not a valid DID method name.")
        return value

    @field_validator("document_stores")
    @classmethod
    def validate_store_methods(cls, value: dict[str, str]) -> dict[str, str]:
        for method in value:
            if not _METHOD_NAME.fullmatch(method):
                raise ValueError(f"{method!r} is not a valid DID method name.")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}.")
        return level


def load_settings(path: Path) -> ResolverSettings:
    """Read :class:`ResolverSettings` from the JSON file at *path*.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not JSON, or fails validation.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Settings file {str(path)!r} does not exist.") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Settings file {str(path)!r} is not valid JSON: {exc}") from exc
    try:
        settings = ResolverSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {str(path)!r}: {exc}") from exc

    base_dir = path.parent
    stores = {
        method: str(store_path if Path(store_path).is_absolute() else base_dir / store_path)
        for method, store_path in settings.document_stores.items()
    }
    return settings.model_copy(update={"document_stores": stores})


def build_registry(settings: ResolverSettings | None = None) -> ResolverRegistry:
    """Return a :class:`ResolverRegistry` configured by *settings*.

    Raises
    ------
    ConfigurationError
        If a method has no known strategy, a method is configured twice,
        or a document store file cannot be read.
    """
    settings = settings if settings is not None else ResolverSettings()
    if settings.load_entrypoints:
        strategy_plugins.load_entrypoints(ENTRYPOINT_GROUP)

    registry = ResolverRegistry()
    try:
        for method in settings.methods:
            if method == DidKeriStrategy.method:
                registry.register(DidKeriStrategy(verify_signatures=settings.verify_signatures))
                continue
            try:
                strategy_class = strategy_plugins.get(method)
            except PluginNotFoundError as exc:
                raise ConfigurationError(f"No strategy available for did:{method}.") from exc
            registry.register(strategy_class(), method)

        for method, store_path in settings.document_stores.items():
            store = DocumentStoreStrategy(method)
            try:
                store.import_store(Path(store_path))
            except (OSError, ValueError) as exc:
                raise ConfigurationError(
                    f"Cannot load the did:{method} document store {store_path!r}: {exc}"
                ) from exc
            registry.register(store)
    except PluginAlreadyRegisteredError as exc:
        raise ConfigurationError(f"did:{exc.plugin_name} is configured more than once.") from exc

    logger.info("Built resolver registry for methods %s", registry.methods())
    return registry


__all__ = ["ResolverSettings", "build_registry", "load_settings"]
