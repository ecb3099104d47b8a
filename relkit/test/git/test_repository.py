"""Tests for relkit.git.repository module."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import pytest

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import RepoInfo, Repository, parse_remote
from relkit.output.console import MockConsole
from relkit.platform.environment import RunOptions
from relkit.platform.process import ProcessError
from relkit.release import shell as shell_mod
from relkit.release.shell import Shell


def _err(cmd: str, stderr: str, returncode: int = 128) -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd.split()), returncode, "", stderr))


def _repo(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    responses: Mapping[str, Result[str, ProcessError]],
    *,
    dry_run: bool = False,
) -> tuple[Repository, list[str]]:
    calls: list[str] = []

    def fake_run(
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        key = " ".join(cmd)
        calls.append(key)
        return responses.get(key, Ok(""))

    monkeypatch.setattr(shell_mod, "run_process", fake_run)
    shell = Shell(cwd=tmp_path, options=RunOptions(dry_run=dry_run), console=MockConsole())
    return Repository(shell), calls


class TestParseRemote:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/user/repo.git", RepoInfo("github.com", "user", "repo")),
            ("https://github.com/user/repo", RepoInfo("github.com", "user", "repo")),
            ("git@github.com:user/repo.git", RepoInfo("github.com", "user", "repo")),
            ("ssh://git@github.example.org:22/org/tool.git", RepoInfo("github.example.org", "org", "tool")),
            ("git://github.com:user/repo", RepoInfo("github.com", "user", "repo")),
            ("https://gitlab.com/group/sub/project.git", RepoInfo("gitlab.com", "group/sub", "project")),
        ],
    )
    def test_forms(self, url: str, expected: RepoInfo) -> None:
        assert parse_remote(url) == expected

    @pytest.mark.parametrize("url", ["", "not a url", "https://github.com/only-owner"])
    def test_invalid(self, url: str) -> None:
        assert parse_remote(url) is None

    def test_repository(self) -> None:
        assert RepoInfo("github.com", "user", "repo").repository == "user/repo"


class TestQueries:
    def test_latest_tag(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, _ = _repo(monkeypatch, tmp_path, {"git describe --tags --abbrev=0": Ok("2.0.1\n")})
        assert repo.latest_tag() == Ok("2.0.1")

    def test_no_tags(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, _ = _repo(
            monkeypatch,
            tmp_path,
            {"git describe --tags --abbrev=0": _err("git describe", "fatal: No names found")},
        )
        result = repo.latest_tag()
        assert isinstance(result, Err)
        assert result.error.message == "fatal: No names found"
        assert result.error.returncode == 128

    def test_remote_url(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, _ = _repo(
            monkeypatch,
            tmp_path,
            {"git config --get remote.origin.url": Ok("git@github.com:user/repo.git")},
        )
        assert repo.remote_url() == Ok("git@github.com:user/repo.git")

    def test_missing_remote(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, _ = _repo(monkeypatch, tmp_path, {})
        assert isinstance(repo.remote_url("upstream"), Err)

    def test_changelog_since_tag(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, calls = _repo(monkeypatch, tmp_path, {})
        repo.changelog("v1.0.0")
        repo.changelog(None)
        assert calls == [
            "git log --pretty=format:* %s (%h) v1.0.0...HEAD",
            "git log --pretty=format:* %s (%h)",
        ]

    def test_is_clean(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        key = "git status --porcelain --untracked-files=no"
        clean, _ = _repo(monkeypatch, tmp_path, {key: Ok("")})
        assert clean.is_clean() == Ok(True)
        dirty, _ = _repo(monkeypatch, tmp_path, {key: Ok(" M package.json")})
        assert dirty.is_clean() == Ok(False)

    def test_has_upstream(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        key = "git rev-parse --abbrev-ref --symbolic-full-name @{u}"
        tracked, _ = _repo(monkeypatch, tmp_path, {key: Ok("origin/main")})
        assert tracked.has_upstream()
        untracked, _ = _repo(monkeypatch, tmp_path, {key: _err("git rev-parse", "fatal: no upstream")})
        assert not untracked.has_upstream()


class TestActions:
    def test_commands(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, calls = _repo(monkeypatch, tmp_path, {})
        repo.stage_tracked()
        repo.commit("Release 2.0.2")
        repo.tag("2.0.2", "Release 2.0.2")
        repo.push()
        repo.push("upstream")
        assert calls == [
            "git add . --update",
            "git commit --message Release 2.0.2",
            "git tag --annotate --message Release 2.0.2 2.0.2",
            "git push --follow-tags",
            "git push --follow-tags upstream",
        ]

    def test_dry_run_does_not_write(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, calls = _repo(monkeypatch, tmp_path, {}, dry_run=True)
        assert repo.commit("Release 1.0.0") == Ok("")
        assert repo.push() == Ok("")
        assert calls == []
        assert repo.shell.commands == [
            "git commit --message 'Release 1.0.0'",
            "git push --follow-tags",
        ]

    def test_write_failure_uses_combined_output(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        repo, _ = _repo(
            monkeypatch,
            tmp_path,
            {
                "git commit --message Release 1.0.0": Err(
                    ProcessError(("git", "commit"), 1, "nothing to commit, working tree clean", "")
                )
            },
        )
        result = repo.commit("Release 1.0.0")
        assert isinstance(result, Err)
        assert "nothing to commit" in result.error.message
