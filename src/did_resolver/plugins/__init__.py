"""Plugin subsystem for did-resolver.

Third-party resolution strategies register through ``importlib.metadata``
entry points under the ``did_resolver.methods`` group.

Example
-------
Declare a strategy in pyproject.toml:

.. code-block:: toml

    [project.entry-points."did_resolver.methods"]
    web = "my_package.did_web:DidWebStrategy"
"""
from __future__ import annotations

from did_resolver.plugins.registry import (
    PluginAlreadyRegisteredError,
    PluginNotFoundError,
    PluginRegistry,
)

__all__ = ["PluginAlreadyRegisteredError", "PluginNotFoundError", "PluginRegistry"]
