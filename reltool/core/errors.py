"""Exit codes for the release-tool CLI.

The numeric values are part of the command-line contract and must stay stable:
- 0: Success
- 1: User error (bad reference, missing directory, invalid config)
- 2: Environment error (git missing, not a repository)
- 3: State error (no commits to publish, HEAD not tagged)
- 4: Network error (git push rejected, registry push failed)
- 5: I/O error (archive could not be written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    STATE_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
