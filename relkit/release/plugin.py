"""Plugin lifecycle contract.

A plugin is one release target (a registry, a code host, the local VCS). The
orchestrator only talks to this interface, in three phases:

1. ``init()``: validate preconditions, populate the context.
2. ``bump(version)``: update the target's record of the version.
3. ``release()``: publish; set ``is_released`` only on confirmed success.

Each phase returns ``Ok(None)`` or ``Err(ReleaseError)``. Plugins get their
capabilities (context, shell, steps, console, environment) from a
``Runtime`` built once per run.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, TypeVar

from relkit.core.config import ReleaseConfig
from relkit.core.context import Context
from relkit.core.result import Ok, Result
from relkit.output.console import ConsoleProtocol
from relkit.output.prompt import Prompter
from relkit.platform.environment import RunOptions
from relkit.platform.http import HttpClient
from relkit.release.errors import ReleaseError
from relkit.release.shell import Shell, render
from relkit.release.steps import Prompt, StepConfig, StepRunner

T = TypeVar("T")

__all__ = ["Plugin", "Runtime", "create_runtime"]


@dataclass(frozen=True, slots=True)
class Runtime:
    """Capabilities shared by every plugin of one run."""

    context: Context
    shell: Shell
    steps: StepRunner
    console: ConsoleProtocol
    env: Mapping[str, str]
    options: RunOptions
    cwd: Path
    # Factory for remote API clients: (proxy, timeout) -> HttpClient.
    http_factory: Callable[[str | None, float], HttpClient] | None = None


def create_runtime(
    *,
    cwd: Path,
    options: RunOptions,
    console: ConsoleProtocol,
    env: Mapping[str, str],
    prompter: Prompter | None = None,
    http_factory: Callable[[str | None, float], HttpClient] | None = None,
    context: Context | None = None,
) -> Runtime:
    shell = Shell(cwd=cwd, options=options, console=console)
    return Runtime(
        context=context if context is not None else Context(),
        shell=shell,
        steps=StepRunner(
            console=console,
            prompter=prompter,
            options=options,
            spinner=not options.verbose,
            shell=shell,
        ),
        console=console,
        env=env,
        options=options,
        cwd=cwd,
        http_factory=http_factory,
    )


class Plugin[C](ABC):
    namespace: ClassVar[str]
    # Prompt templates by key; ``${name}`` placeholders come from template_vars().
    prompts: ClassVar[Mapping[str, Prompt]] = {}

    def __init__(self, config: C, runtime: Runtime) -> None:
        self.config = config
        self.runtime = runtime
        self.context = runtime.context
        self.shell = runtime.shell
        self.console = runtime.console
        self.options = runtime.options
        self.env = runtime.env
        self._released = False

    @classmethod
    @abstractmethod
    def is_enabled(cls, config: ReleaseConfig, cwd: Path) -> bool:
        """Whether this target applies to the project in ``cwd``."""
        ...

    @classmethod
    @abstractmethod
    def select_config(cls, config: ReleaseConfig) -> C:
        """This plugin's slice of the configuration."""
        ...

    # Lifecycle

    def init(self) -> Result[None, ReleaseError]:
        return Ok(None)

    def bump(self, version: str) -> Result[None, ReleaseError]:
        return Ok(None)

    def release(self) -> Result[None, ReleaseError]:
        return Ok(None)

    # Derived values

    def get_name(self) -> str | None:
        value = self.get_context("name")
        return value if isinstance(value, str) else None

    def get_latest_version(self) -> str | None:
        """Version currently released by this target, if it knows one."""
        return None

    def get_release_url(self) -> str | None:
        return None

    @property
    def is_released(self) -> bool:
        return self._released

    def mark_released(self) -> None:
        # Terminal: never reset once set.
        self._released = True

    # Context

    def get_context(self, path: str | None = None) -> object | None:
        """Read from this plugin's namespace (``path`` is relative to it)."""
        return self.context.get(f"{self.namespace}.{path}" if path else self.namespace)

    def set_context(self, partial: Mapping[str, object]) -> None:
        self.context.set({self.namespace: dict(partial)})

    def template_vars(self) -> dict[str, object]:
        """Scalar values usable in ``${name}`` templates (root, then namespace)."""
        out: dict[str, object] = {}
        for table in (self.context.get(), self.get_context()):
            if isinstance(table, Mapping):
                for key, value in table.items():
                    if isinstance(key, str) and isinstance(value, (str, int, float, bool)):
                        out[key] = value
        return out

    def format(self, template: str) -> str:
        return render(template, self.template_vars())

    # Steps

    def prompt(self, key: str) -> Prompt:
        template = self.prompts[key]
        return Prompt(key=key, message=self.format(template.message), kind=template.kind, default=template.default)

    def step(
        self,
        *,
        task: Callable[..., Result[T, ReleaseError]],
        label: str | None = None,
        prompt: str | None = None,
        dry_run_skip: bool = False,
    ) -> Result[T | None, ReleaseError]:
        return self.runtime.steps.step(
            StepConfig(
                task=task,
                label=label,
                prompt=self.prompt(prompt) if prompt else None,
                dry_run_skip=dry_run_skip,
            )
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(namespace={self.namespace!r})"
