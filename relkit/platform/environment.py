"""Run options and CI detection.

The process environment is never read from ``os.environ`` below the CLI: it is
captured once and passed to plugins as a plain mapping, so tests can hand in
exactly the variables they need.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

__all__ = ["CI_MARKERS", "RunOptions", "is_ci", "trusted_actor"]

CI_MARKERS = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "BUILD_NUMBER",
    "RUN_ID",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
)

_FALSY = {"", "0", "false", "no"}


@dataclass(frozen=True, slots=True)
class RunOptions:
    """Global switches for one release run.

    Attributes:
        dry_run: Do not execute mutating commands or remote calls.
        ci: Non-interactive mode: no prompts, steps run directly.
        verbose: Show debug output.
    """

    dry_run: bool = False
    ci: bool = False
    verbose: bool = False

    @property
    def is_interactive(self) -> bool:
        return not self.ci


def _is_set(env: Mapping[str, str], key: str) -> bool:
    value = env.get(key)
    return value is not None and value.strip().lower() not in _FALSY


def is_ci(env: Mapping[str, str]) -> bool:
    return any(_is_set(env, key) for key in CI_MARKERS)


def trusted_actor(env: Mapping[str, str]) -> str | None:
    """Identity supplied by a CI provider that authenticates the run itself.

    Only GitHub Actions is recognised: it sets ``GITHUB_ACTOR`` for the user
    that triggered the workflow.
    """
    if not _is_set(env, "GITHUB_ACTIONS"):
        return None
    actor = env.get("GITHUB_ACTOR", "").strip()
    return actor or None
