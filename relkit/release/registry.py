"""Known release targets, in the order they run within each phase."""

from __future__ import annotations

from typing import Any

from relkit.core.config import ReleaseConfig
from relkit.plugins.git import GitPlugin
from relkit.plugins.github import GitHubPlugin
from relkit.plugins.npm import NpmPlugin
from relkit.release.plugin import Plugin, Runtime

__all__ = ["PLUGIN_TYPES", "create_plugins"]

PLUGIN_TYPES: tuple[type[Plugin[Any]], ...] = (NpmPlugin, GitPlugin, GitHubPlugin)


def create_plugins(config: ReleaseConfig, runtime: Runtime) -> list[Plugin[Any]]:
    """Instantiate every enabled plugin with its own config slice."""
    return [
        plugin_type(plugin_type.select_config(config), runtime)
        for plugin_type in PLUGIN_TYPES
        if plugin_type.is_enabled(config, runtime.cwd)
    ]
