"""Tests for relkit.release.shell module."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok, Result
from relkit.output.console import MockConsole, Style
from relkit.platform.environment import RunOptions
from relkit.platform.process import ProcessError
from relkit.release import shell as shell_mod
from relkit.release.shell import ExecRecord, Shell, render


def _patch_run(
    monkeypatch: pytest.MonkeyPatch,
    response: Result[str, ProcessError],
) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        calls.append(cmd)
        return response

    monkeypatch.setattr(shell_mod, "run_process", fake_run)
    return calls


def _shell(tmp_path: Path, *, dry_run: bool = False) -> tuple[Shell, MockConsole]:
    console = MockConsole()
    return Shell(cwd=tmp_path, options=RunOptions(dry_run=dry_run), console=console), console


def test_render_keeps_unknown_placeholders() -> None:
    assert render("Release ${version} (${missing})", {"version": "1.0.0"}) == "Release 1.0.0 (${missing})"


def test_exec_returns_stripped_stdout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_run(monkeypatch, Ok("v1.0.0\n"))
    shell, console = _shell(tmp_path)

    result = shell.exec(["git", "describe", "--tags", "--abbrev=0"], write=False)

    assert result == Ok("v1.0.0")
    assert calls == [["git", "describe", "--tags", "--abbrev=0"]]
    assert console.messages == ["$ git describe --tags --abbrev=0"]


def test_exec_string_is_rendered_and_split(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_run(monkeypatch, Ok(""))
    shell, _ = _shell(tmp_path)

    shell.exec('git commit --message "Release ${version}"', template_vars={"version": "2.0.2"})

    assert calls == [["git", "commit", "--message", "Release 2.0.2"]]
    assert shell.commands == ['git commit --message "Release 2.0.2"']


def test_dry_run_skips_write(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_run(monkeypatch, Ok("should not run"))
    shell, console = _shell(tmp_path, dry_run=True)

    result = shell.exec(["npm", "publish", ".", "--tag", "latest"])

    assert result == Ok("")
    assert calls == []
    assert shell.exec_log == [ExecRecord("npm publish . --tag latest", executed=False)]
    assert console.outputs[0].message == "! (dry-run) npm publish . --tag latest"
    assert console.outputs[0].style == Style.DIM


def test_dry_run_still_reads(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _patch_run(monkeypatch, Ok("john"))
    shell, _ = _shell(tmp_path, dry_run=True)

    assert shell.exec(["npm", "whoami"], write=False) == Ok("john")
    assert calls == [["npm", "whoami"]]
    assert shell.exec_log == [ExecRecord("npm whoami", executed=True)]


def test_failure_is_returned(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    error = ProcessError(("git", "push"), 1, "", "rejected")
    _patch_run(monkeypatch, Err(error))
    shell, console = _shell(tmp_path)

    result = shell.exec(["git", "push"])

    assert result == Err(error)
    assert console.count(Style.DEBUG) == 1


def test_log_exec_records_api_operations(tmp_path: Path) -> None:
    shell, _ = _shell(tmp_path)
    shell.log_exec("github releases#publish (v1.0.0)")
    shell.log_exec("github releases#draft", executed=False)
    assert shell.commands == ["github releases#publish (v1.0.0)", "github releases#draft"]
    assert [r.executed for r in shell.exec_log] == [True, False]
