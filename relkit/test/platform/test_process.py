"""Tests for relkit.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok
from relkit.platform.process import ProcessError, run


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("npm", "whoami"),
            returncode=1,
            stdout="",
            stderr="npm ERR! code E401",
        )
        assert str(error) == "npm whoami failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("npm", "publish", ".", "--tag", "latest"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "npm publish . ... failed (exit 1)"

    def test_output_combines_streams(self) -> None:
        error = ProcessError(("npm", "publish"), 1, "partial\n", "npm ERR! one-time pass\n")
        assert error.output == "partial\nnpm ERR! one-time pass"

    def test_output_skips_empty_stream(self) -> None:
        error = ProcessError(("git", "push"), 1, "", "rejected")
        assert error.output == "rejected"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad'); sys.exit(3)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "bad"

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["relkit-no-such-binary"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_env_is_passed(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import os; print(os.environ['RELKIT_PROBE'])"],
            cwd=tmp_path,
            env={"RELKIT_PROBE": "42", "PATH": ""},
        )

        assert isinstance(result, Ok)
        assert result.value.strip() == "42"
