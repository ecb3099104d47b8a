"""Git access for release plugins."""

from .repository import GitError, RepoInfo, Repository, parse_remote

__all__ = [
    "GitError",
    "RepoInfo",
    "Repository",
    "parse_remote",
]
