"""Tests for relkit.platform.environment module."""

from __future__ import annotations

import pytest

from relkit.platform.environment import RunOptions, is_ci, trusted_actor


class TestIsCi:
    @pytest.mark.parametrize("key", ["CI", "GITHUB_ACTIONS", "GITLAB_CI", "BUILD_NUMBER"])
    def test_markers(self, key: str) -> None:
        assert is_ci({key: "true"})

    def test_empty_env(self) -> None:
        assert not is_ci({})

    @pytest.mark.parametrize("value", ["", "0", "false", "No"])
    def test_falsy_values(self, value: str) -> None:
        assert not is_ci({"CI": value})


class TestTrustedActor:
    def test_github_actions(self) -> None:
        assert trusted_actor({"GITHUB_ACTIONS": "true", "GITHUB_ACTOR": "webpro"}) == "webpro"

    def test_actor_without_actions(self) -> None:
        assert trusted_actor({"GITHUB_ACTOR": "webpro"}) is None

    def test_actions_without_actor(self) -> None:
        assert trusted_actor({"GITHUB_ACTIONS": "true", "GITHUB_ACTOR": " "}) is None


def test_run_options_interactive() -> None:
    assert RunOptions().is_interactive
    assert not RunOptions(ci=True).is_interactive
    assert RunOptions(dry_run=True).is_interactive
