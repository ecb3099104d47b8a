"""Version-control queries and actions used by release plugins.

All commands go through ``relkit.release.shell.Shell`` so they obey dry-run
mode and show up in the exec log.

Usage:
    repo = Repository(shell)
    match repo.latest_tag():
        case Ok(tag):
            print(f"latest: {tag}")
        case Err(e):
            print(f"no tags: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from relkit.core.result import Err, Ok, Result
from relkit.release.shell import Shell

__all__ = [
    "GitError",
    "RepoInfo",
    "Repository",
    "parse_remote",
]

_REMOTE_RE = re.compile(
    r"^(?:(?P<scheme>[a-z][a-z0-9+.-]*)://)?"
    r"(?:[^@/]+@)?"
    r"(?P<host>[^:/]+)"
    r"(?::(?P<port>\d+))?"
    r"[:/](?P<path>.+)$"
)


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git sub-command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class RepoInfo:
    """Hosting coordinates parsed from a remote URL."""

    host: str
    owner: str
    project: str

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.project}"


def parse_remote(url: str) -> RepoInfo | None:
    """Parse https, ssh, scp-like and ``git://host:owner/repo`` remote URLs."""
    m = _REMOTE_RE.match(url.strip())
    if m is None:
        return None

    path = m.group("path").strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = [p for p in path.split("/") if p]
    if len(parts) < 2:
        return None
    return RepoInfo(host=m.group("host"), owner="/".join(parts[:-1]), project=parts[-1])


class Repository:
    """Git operations for the project in the shell's working directory."""

    def __init__(self, shell: Shell) -> None:
        self.shell = shell

    def _read(self, args: list[str]) -> Result[str, GitError]:
        result = self.shell.exec(["git", *args], write=False)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=args[0],
                    message=e.stderr.strip() or f"git {args[0]} failed",
                    returncode=e.returncode,
                )
            )
        return result

    def _write(self, args: list[str]) -> Result[str, GitError]:
        result = self.shell.exec(["git", *args], write=True)
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=args[0],
                    message=e.output or f"git {args[0]} failed",
                    returncode=e.returncode,
                )
            )
        return result

    # Queries

    def latest_tag(self) -> Result[str, GitError]:
        result = self._read(["describe", "--tags", "--abbrev=0"])
        if isinstance(result, Ok) and not result.value:
            return Err(GitError(command="describe", message="no tags found"))
        return result

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        result = self._read(["config", "--get", f"remote.{remote}.url"])
        if isinstance(result, Ok) and not result.value:
            return Err(GitError(command="config", message=f"remote {remote!r} has no url"))
        return result

    def changelog(self, since_tag: str | None) -> Result[str, GitError]:
        """One line per commit since ``since_tag`` (all history when None)."""
        args = ["log", "--pretty=format:* %s (%h)"]
        if since_tag:
            args.append(f"{since_tag}...HEAD")
        return self._read(args)

    def is_clean(self) -> Result[bool, GitError]:
        result = self._read(["status", "--porcelain", "--untracked-files=no"])
        if isinstance(result, Err):
            return result
        return Ok(not result.value)

    def has_upstream(self) -> bool:
        result = self._read(["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}"])
        return isinstance(result, Ok) and bool(result.value)

    # Actions

    def stage_tracked(self) -> Result[str, GitError]:
        return self._write(["add", ".", "--update"])

    def commit(self, message: str) -> Result[str, GitError]:
        return self._write(["commit", "--message", message])

    def tag(self, name: str, annotation: str) -> Result[str, GitError]:
        return self._write(["tag", "--annotate", "--message", annotation, name])

    def push(self, repo: str | None = None) -> Result[str, GitError]:
        args = ["push", "--follow-tags"]
        if repo:
            args.append(repo)
        return self._write(args)
