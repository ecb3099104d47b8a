"""Step runner: one labeled unit of work, optionally prompted and animated.

Behavior of ``StepRunner.step``:

- dry run and ``dry_run_skip``: the task is not invoked; a synthetic success
  is printed under the step label.
- prompt set and the run is interactive: a ``confirm`` prompt runs or skips
  the task; an ``input`` prompt passes the answer to the task (an empty
  answer skips it).
- label set and the spinner enabled: the task runs under a progress
  indicator, followed by an ``OK <label>`` or ``FAIL <label>`` line. The
  task's result (or exception) is passed through unchanged.

Steps run to completion before ``step`` returns, so they never overlap.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.output.prompt import Prompter
from relkit.platform.environment import RunOptions
from relkit.release.errors import ReleaseError
from relkit.release.shell import Shell

T = TypeVar("T")

PromptKind = Literal["confirm", "input"]

__all__ = ["Prompt", "PromptKind", "StepConfig", "StepRunner"]


@dataclass(frozen=True, slots=True)
class Prompt:
    key: str
    message: str
    kind: PromptKind = "confirm"
    default: bool = True


@dataclass(frozen=True, slots=True)
class StepConfig[T]:
    """Description of one step.

    Attributes:
        task: Work to run. Called with the answer for ``input`` prompts,
            without arguments otherwise.
        label: Display label for progress and dry-run output.
        prompt: Question asked first in interactive runs.
        dry_run_skip: Do not invoke the task at all in dry runs.
    """

    task: Callable[..., Result[T, ReleaseError]]
    label: str | None = None
    prompt: Prompt | None = None
    dry_run_skip: bool = False

    @property
    def display_name(self) -> str:
        if self.label:
            return self.label
        if self.prompt is not None:
            return self.prompt.key
        return "step"


class StepRunner:
    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        prompter: Prompter | None,
        options: RunOptions,
        spinner: bool = True,
        shell: Shell | None = None,
    ) -> None:
        self.console = console
        self.prompter = prompter
        self.options = options
        self.spinner = spinner
        # Receives the synthetic successes of skipped dry-run steps.
        self.shell = shell

    @property
    def is_interactive(self) -> bool:
        return self.options.is_interactive and self.prompter is not None

    def step(self, config: StepConfig[T]) -> Result[T | None, ReleaseError]:
        if config.dry_run_skip and self.options.dry_run:
            if self.shell is not None:
                self.shell.record(config.display_name, executed=False)
            self.console.print(f"OK {config.display_name} (dry-run)", Style.DIM)
            return Ok(None)

        if config.prompt is not None and self.is_interactive:
            return self._prompted(config, config.prompt)

        return self._run(config, ())

    def ask(self, prompt: Prompt) -> str | None:
        """Ask for an alternate input; None when not interactive or left empty."""
        if not self.is_interactive or self.prompter is None:
            return None
        answer = self.prompter.ask(prompt.message, secret=True).strip()
        return answer or None

    def _prompted(self, config: StepConfig[T], prompt: Prompt) -> Result[T | None, ReleaseError]:
        if prompt.kind == "input":
            answer = self.ask(prompt)
            if answer is None:
                self._skipped(config)
                return Ok(None)
            return self._run(config, (answer,))

        assert self.prompter is not None
        if not self.prompter.confirm(prompt.message, prompt.default):
            self._skipped(config)
            return Ok(None)
        return self._run(config, ())

    def _skipped(self, config: StepConfig[T]) -> None:
        self.console.print(f"Skipped: {config.display_name}", Style.DIM)

    def _run(self, config: StepConfig[T], args: tuple[str, ...]) -> Result[T, ReleaseError]:
        if not (config.label and self.spinner):
            return config.task(*args)

        label = config.label
        try:
            with self.console.status(label):
                result = config.task(*args)
        except Exception:
            self.console.print(f"FAIL {label}", Style.ERROR)
            raise

        if isinstance(result, Err):
            self.console.print(f"FAIL {label}", Style.ERROR)
        else:
            self.console.print(f"OK {label}", Style.SUCCESS)
        return result
