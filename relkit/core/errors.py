"""Exit codes for the relkit CLI.

Each release error maps to one of these codes (see ``relkit.output.errors``).
The numeric values are part of the CLI contract and should remain stable:
- 0: Success
- 1: User error (bad arguments, invalid version)
- 2: Configuration error (missing token variable, unreadable config file)
- 3: Authentication or authorization failure
- 4: Network or remote API failure
- 5: Release action failed (publish, commit, tag, push)
- 6: Precondition validation timed out
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    RELEASE_ERROR = 5
    TIMEOUT = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
