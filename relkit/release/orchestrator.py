"""Release orchestrator.

Drives every plugin through ``init``, then ``bump``, then ``release``. Each
phase visits plugins in registration order and finishes before the next one
starts. The first error aborts the run and is returned unchanged; effects of
plugins that already completed are left in place (there is no rollback).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from relkit.core.context import Context
from relkit.core.result import Err, Ok, Result
from relkit.core.version import resolve_next_version
from relkit.output.console import ConsoleProtocol, Style
from relkit.release.errors import PreconditionFailed, ReleaseError
from relkit.release.plugin import Plugin

__all__ = ["Orchestrator", "ReleaseSummary"]


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    latest_version: str | None
    version: str
    # Namespaces of plugins that confirmed their release.
    released: tuple[str, ...]
    release_urls: tuple[str, ...]


class Orchestrator:
    def __init__(
        self,
        plugins: Sequence[Plugin[Any]],
        context: Context,
        console: ConsoleProtocol,
    ) -> None:
        self.plugins = list(plugins)
        self.context = context
        self.console = console

    def get_context(self, path: str | None = None) -> object | None:
        return self.context.get(path)

    def _phase(
        self,
        name: str,
        action: Callable[[Plugin[Any]], Result[None, ReleaseError]],
    ) -> Result[None, ReleaseError]:
        for plugin in self.plugins:
            self.console.debug(f"{name}: {plugin.namespace}")
            result = action(plugin)
            if isinstance(result, Err):
                return result
        return Ok(None)

    def latest_version(self) -> str | None:
        """Latest version reported by the first plugin that knows one."""
        for plugin in self.plugins:
            version = plugin.get_latest_version()
            if version:
                return version
        return None

    def run(
        self,
        increment_or_version: str | None = None,
        pre_id: str | None = None,
    ) -> Result[ReleaseSummary, ReleaseError]:
        """Run a full release.

        Args:
            increment_or_version: ``major``/``minor``/``patch``/``pre*`` or an
                explicit version. Defaults to ``patch``.
            pre_id: Pre-release identifier for ``pre*`` increments.
        """
        initialized = self._phase("init", lambda p: p.init())
        if isinstance(initialized, Err):
            return initialized

        latest = self.latest_version()
        next_version = resolve_next_version(latest, increment_or_version, pre_id)
        if next_version is None:
            return Err(
                PreconditionFailed(
                    target="version",
                    reason=f'Invalid version or increment: "{increment_or_version}"',
                )
            )

        version = str(next_version)
        self.context.set({"latest_version": latest or "", "version": version})
        self.console.header(f"Release {version}" + (f" (from {latest})" if latest else ""))

        bumped = self._phase("bump", lambda p: p.bump(version))
        if isinstance(bumped, Err):
            return bumped

        released = self._phase("release", lambda p: p.release())
        if isinstance(released, Err):
            return released

        urls = tuple(url for p in self.plugins if (url := p.get_release_url()))
        for url in urls:
            self.console.print(f"  {url}", Style.INFO)

        return Ok(
            ReleaseSummary(
                latest_version=latest,
                version=version,
                released=tuple(p.namespace for p in self.plugins if p.is_released),
                release_urls=urls,
            )
        )
