"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.errors import ErrorCode
from relkit.output.console import Style
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

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print release error to console with appropriate formatting."""
    match error:
        case ConfigError(variable=variable):
            console.error(error.message)
            console.print(f"hint: export {variable}=...", Style.DIM)
        case AuthError(target=target, detail=detail):
            console.error(f"{target}: {detail}")
        case AuthorizationError():
            console.error(error.message)
        case PreconditionTimeout():
            console.error(error.message)
        case PreconditionFailed(target=target, reason=reason):
            console.error(f"{target}: {reason}")
        case ClientError():
            console.error(str(error))
        case ReleaseActionFailed(detail=detail):
            console.error(error.message)
            if detail:
                console.print(detail, Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error:
        case ConfigError():
            return int(ErrorCode.CONFIG_ERROR)
        case AuthError() | AuthorizationError():
            return int(ErrorCode.AUTH_ERROR)
        case PreconditionTimeout():
            return int(ErrorCode.TIMEOUT)
        case PreconditionFailed(target="version"):
            return int(ErrorCode.USER_ERROR)
        case PreconditionFailed():
            return int(ErrorCode.RELEASE_ERROR)
        case ClientError():
            return int(ErrorCode.NETWORK_ERROR)
        case ReleaseActionFailed():
            return int(ErrorCode.RELEASE_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.RELEASE_ERROR)
