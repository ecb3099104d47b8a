"""Tests for relkit.release.orchestrator module."""

from __future__ import annotations

from pathlib import Path

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.output.console import MockConsole
from relkit.platform.environment import RunOptions
from relkit.release.errors import (
    AuthError,
    PreconditionFailed,
    ReleaseActionFailed,
    ReleaseError,
)
from relkit.release.orchestrator import Orchestrator, ReleaseSummary
from relkit.release.plugin import Plugin, Runtime, create_runtime


class _Recorder(Plugin[None]):
    namespace = "recorder"

    def __init__(
        self,
        runtime: Runtime,
        journal: list[str],
        *,
        name: str,
        latest: str | None = None,
        fail: dict[str, ReleaseError] | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(None, runtime)
        self.journal = journal
        self.name = name
        self.latest = latest
        self.fail = fail or {}
        self.url = url
        self.bumped_to: str | None = None

    @classmethod
    def is_enabled(cls, config: ReleaseConfig, cwd: Path) -> bool:
        return True

    @classmethod
    def select_config(cls, config: ReleaseConfig) -> None:
        return None

    def _record(self, phase: str) -> Result[None, ReleaseError]:
        self.journal.append(f"{phase}:{self.name}")
        if phase in self.fail:
            return Err(self.fail[phase])
        return Ok(None)

    def init(self) -> Result[None, ReleaseError]:
        return self._record("init")

    def bump(self, version: str) -> Result[None, ReleaseError]:
        self.bumped_to = version
        return self._record("bump")

    def release(self) -> Result[None, ReleaseError]:
        result = self._record("release")
        if isinstance(result, Ok):
            self.mark_released()
        return result

    def get_latest_version(self) -> str | None:
        return self.latest

    def get_release_url(self) -> str | None:
        return self.url


def _setup(tmp_path: Path) -> tuple[Runtime, MockConsole, list[str]]:
    console = MockConsole()
    runtime = create_runtime(cwd=tmp_path, options=RunOptions(ci=True), console=console, env={})
    return runtime, console, []


def test_phases_run_in_order_across_plugins(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    a = _Recorder(runtime, journal, name="a", latest="2.0.1", url="https://example.org/a")
    b = _Recorder(runtime, journal, name="b")
    orchestrator = Orchestrator([a, b], runtime.context, console)

    result = orchestrator.run("patch")

    assert journal == ["init:a", "init:b", "bump:a", "bump:b", "release:a", "release:b"]
    assert result == Ok(
        ReleaseSummary(
            latest_version="2.0.1",
            version="2.0.2",
            released=("recorder", "recorder"),
            release_urls=("https://example.org/a",),
        )
    )
    assert a.bumped_to == b.bumped_to == "2.0.2"


def test_version_stored_in_context(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    orchestrator = Orchestrator([_Recorder(runtime, journal, name="a", latest="1.4.0")], runtime.context, console)

    orchestrator.run("minor")

    assert orchestrator.get_context("version") == "1.5.0"
    assert orchestrator.get_context("latest_version") == "1.4.0"


def test_latest_version_from_first_plugin_that_knows(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    plugins = [
        _Recorder(runtime, journal, name="a"),
        _Recorder(runtime, journal, name="b", latest="3.1.0"),
        _Recorder(runtime, journal, name="c", latest="9.9.9"),
    ]
    orchestrator = Orchestrator(plugins, runtime.context, console)

    assert orchestrator.latest_version() == "3.1.0"


def test_first_release_starts_from_zero(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    orchestrator = Orchestrator([_Recorder(runtime, journal, name="a")], runtime.context, console)

    result = orchestrator.run("patch")

    assert isinstance(result, Ok)
    assert result.value.version == "0.0.1"
    assert result.value.latest_version is None


def test_init_error_aborts_everything(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    error = AuthError(target="npm", detail="Not authenticated with npm.")
    a = _Recorder(runtime, journal, name="a", fail={"init": error})
    b = _Recorder(runtime, journal, name="b")
    orchestrator = Orchestrator([a, b], runtime.context, console)

    result = orchestrator.run("patch")

    assert result == Err(error)
    assert journal == ["init:a"]


def test_release_error_keeps_earlier_effects(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    error = ReleaseActionFailed(action="git push", detail="rejected")
    a = _Recorder(runtime, journal, name="a")
    b = _Recorder(runtime, journal, name="b", fail={"release": error})
    c = _Recorder(runtime, journal, name="c")
    orchestrator = Orchestrator([a, b, c], runtime.context, console)

    result = orchestrator.run("1.0.0")

    assert result == Err(error)
    assert journal[-2:] == ["release:a", "release:b"]
    assert a.is_released
    assert not b.is_released
    assert not c.is_released


def test_invalid_increment(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    orchestrator = Orchestrator([_Recorder(runtime, journal, name="a")], runtime.context, console)

    result = orchestrator.run("sideways")

    assert isinstance(result, Err)
    assert isinstance(result.error, PreconditionFailed)
    assert result.error.target == "version"
    assert journal == ["init:a"]


def test_pre_id_is_forwarded(tmp_path: Path) -> None:
    runtime, console, journal = _setup(tmp_path)
    orchestrator = Orchestrator([_Recorder(runtime, journal, name="a", latest="1.0.0")], runtime.context, console)

    result = orchestrator.run("prerelease", "beta")

    assert isinstance(result, Ok)
    assert result.value.version == "1.0.1-beta.0"
