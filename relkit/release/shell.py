"""Shell executor used by plugins.

Commands are either argv lists or strings (split with ``shlex`` after
``${var}`` substitution). ``write=True`` marks a command as mutating: in a dry
run it is logged and answered with ``Ok("")`` instead of being executed, so
read commands keep feeding real data to later steps.

Every call, executed or not, lands in ``exec_log`` in call order. Plugins also
record remote API operations there through ``log_exec`` so that a dry run and a
live run produce the same sequence.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from string import Template

from relkit.core.result import Err, Ok, Result
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.environment import RunOptions
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process
from relkit.release.timeouts import SHELL_TIMEOUT_SECONDS

__all__ = ["ExecRecord", "Shell", "render"]


@dataclass(frozen=True, slots=True)
class ExecRecord:
    command: str
    executed: bool


def render(template: str, variables: Mapping[str, object]) -> str:
    """Substitute ``${name}`` placeholders; unknown placeholders are kept."""
    return Template(template).safe_substitute({k: str(v) for k, v in variables.items()})


class Shell:
    def __init__(
        self,
        *,
        cwd: Path,
        options: RunOptions,
        console: ConsoleProtocol,
        env: Mapping[str, str] | None = None,
        timeout: float = SHELL_TIMEOUT_SECONDS,
    ) -> None:
        self.cwd = cwd
        self.options = options
        self.console = console
        self.env = env
        self.timeout = timeout
        self.exec_log: list[ExecRecord] = []

    def exec(
        self,
        command: str | list[str],
        *,
        write: bool = True,
        template_vars: Mapping[str, object] | None = None,
    ) -> Result[str, ProcessError]:
        """Run ``command`` and return its stripped stdout.

        Args:
            command: argv list, or a string split with shlex.
            write: The command changes state; skipped in dry runs.
            template_vars: Values for ``${name}`` placeholders in a string command.
        """
        if isinstance(command, str):
            text = render(command, template_vars or {})
            argv = shlex.split(text)
        else:
            argv = list(command)
            text = shlex.join(argv)

        if write and self.options.dry_run:
            self.log_exec(text, executed=False)
            return Ok("")

        self.log_exec(text, executed=True)
        result = run_process(argv, cwd=self.cwd, env=self.env, timeout=self.timeout)
        if isinstance(result, Err):
            self.console.debug(f"{result.error}: {result.error.output}")
            return result
        return Ok(result.value.strip())

    def record(self, command: str, *, executed: bool) -> None:
        """Add ``command`` to ``exec_log`` without printing it."""
        self.exec_log.append(ExecRecord(command=command, executed=executed))

    def log_exec(self, command: str, *, executed: bool = True) -> None:
        self.record(command, executed=executed)
        prefix = "$" if executed else "! (dry-run)"
        self.console.print(f"{prefix} {command}", Style.DIM)

    @property
    def commands(self) -> list[str]:
        """Logged commands in call order."""
        return [record.command for record in self.exec_log]
