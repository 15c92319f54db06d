"""Process exit codes.

The CI job that invokes a release step only sees the exit status, so the
values below are part of the tool's contract and must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User/configuration error (malformed version, bad release.toml)
    - 2: Environment error (missing gh, missing CI variables)
    - 3: Build error (dependency resolution failed)
    - 4: Network error (git/gh remote operation failed)
    - 5: I/O error (missing hash file, unreadable artifact)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
