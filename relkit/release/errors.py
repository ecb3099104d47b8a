"""Error types for release phases.

Every plugin phase fails with one of these. They are plain values carried in
``Err``; the CLI renders them through ``relkit.output.errors``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ConfigError:
    """A required variable or setting is missing. Never retried."""

    variable: str
    reason: str

    @property
    def message(self) -> str:
        return self.reason

    @property
    def hint(self) -> str | None:
        return f"export {self.variable}=..."


@dataclass(frozen=True, slots=True)
class AuthError:
    """Credentials were rejected (one attempt only)."""

    target: str
    detail: str

    @property
    def message(self) -> str:
        return self.detail

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class AuthorizationError:
    """Authenticated, but not allowed to release the repository."""

    user: str
    repository: str

    @property
    def message(self) -> str:
        return f"User {self.user} is not a collaborator for {self.repository}."

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class PreconditionTimeout:
    """The init validations did not finish before the deadline."""

    target: str
    seconds: float

    @property
    def message(self) -> str:
        return f"Unable to reach {self.target} (timed out after {self.seconds:g}s)."

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class PreconditionFailed:
    """A precondition was checked and is not met (e.g. dirty working dir)."""

    target: str
    reason: str

    @property
    def message(self) -> str:
        return self.reason

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class ClientError:
    """A remote call failed, either permanently or after exhausting retries."""

    status: int
    detail: str

    @property
    def message(self) -> str:
        if not self.status:
            return self.detail
        return f"{self.status} ({self.detail})"

    @property
    def hint(self) -> str | None:
        return None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ReleaseActionFailed:
    """A release action (version bump, publish, commit, tag, push) failed."""

    action: str
    detail: str

    @property
    def message(self) -> str:
        return f"{self.action} failed"

    @property
    def hint(self) -> str | None:
        return self.detail or None


ReleaseError = (
    ConfigError
    | AuthError
    | AuthorizationError
    | PreconditionTimeout
    | PreconditionFailed
    | ClientError
    | ReleaseActionFailed
)
