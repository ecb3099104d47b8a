"""Built-in release targets."""

from .git import GitPlugin
from .github import GitHubPlugin
from .npm import NpmPlugin

__all__ = [
    "GitHubPlugin",
    "GitPlugin",
    "NpmPlugin",
]
