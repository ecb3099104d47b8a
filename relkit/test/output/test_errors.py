"""Tests for relkit.output.errors module."""

from __future__ import annotations

import pytest

from relkit.core.errors import ErrorCode
from relkit.output.console import MockConsole, Style
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.release.errors import (
    AuthError,
    AuthorizationError,
    ClientError,
    ConfigError,
    PreconditionFailed,
    PreconditionTimeout,
    ReleaseActionFailed,
    ReleaseError,
)


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigError("GITHUB_TOKEN", "missing"), ErrorCode.CONFIG_ERROR),
        (AuthError("npm", "Not authenticated"), ErrorCode.AUTH_ERROR),
        (AuthorizationError("john", "user/repo"), ErrorCode.AUTH_ERROR),
        (PreconditionTimeout("npm registry", 10.0), ErrorCode.TIMEOUT),
        (PreconditionFailed("version", "Invalid version"), ErrorCode.USER_ERROR),
        (PreconditionFailed("git", "Working dir must be clean."), ErrorCode.RELEASE_ERROR),
        (ClientError(500, "Request failed"), ErrorCode.NETWORK_ERROR),
        (ReleaseActionFailed("npm publish", "E403"), ErrorCode.RELEASE_ERROR),
    ],
)
def test_exit_codes(error: ReleaseError, code: ErrorCode) -> None:
    assert release_error_exit_code(error) == int(code)


def test_config_error_names_variable() -> None:
    console = MockConsole()
    error = ConfigError(
        variable="GITHUB_TOKEN",
        reason='Environment variable "GITHUB_TOKEN" is required for GitHub releases.',
    )
    print_release_error(error, console)
    assert console.messages == [
        'error: Environment variable "GITHUB_TOKEN" is required for GitHub releases.',
        "hint: export GITHUB_TOKEN=...",
    ]


def test_client_error_format() -> None:
    console = MockConsole()
    print_release_error(ClientError(404, "Not found"), console)
    assert console.messages == ["error: 404 (Not found)"]


def test_action_failed_shows_detail() -> None:
    console = MockConsole()
    print_release_error(ReleaseActionFailed("git push", "rejected"), console)
    assert console.messages == ["error: git push failed", "rejected"]
    assert console.outputs[1].style == Style.DIM


def test_messages() -> None:
    assert AuthorizationError("john", "user/repo").message == "User john is not a collaborator for user/repo."
    assert PreconditionTimeout("npm registry", 10.0).message == (
        "Unable to reach npm registry (timed out after 10s)."
    )
    assert str(ClientError(401, "Bad credentials")) == "401 (Bad credentials)"
