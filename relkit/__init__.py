"""relkit: release orchestration for npm packages, git and GitHub releases."""

__version__ = "0.3.0"
