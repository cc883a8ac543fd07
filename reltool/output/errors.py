"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reltool.core.config import ConfigError
from reltool.core.errors import ErrorCode
from reltool.core.failures import (
    ArchiveWriteError,
    DirectoryNotFound,
    HeadNotTagged,
    MalformedReference,
    NoCommitsFound,
    PushRejected,
    RegistryPushError,
    ReleaseToolError,
    VcsUnavailable,
)
from reltool.output.console import Style

if TYPE_CHECKING:
    from reltool.output.console import ConsoleProtocol

__all__ = ["error_exit_code", "print_error"]


def print_error(error: ReleaseToolError | ConfigError, console: ConsoleProtocol) -> None:
    """Print an error to the console with its hint, if any."""
    match error:
        case DirectoryNotFound(path=path, message=message):
            console.error(f"{message}: {path}")
        case HeadNotTagged(line=line, message=message):
            console.error(message)
            if line:
                console.print(f"release line: {line}", Style.DIM)
        case ConfigError(message=message, path=path):
            console.error(message)
            if path is not None:
                console.print(f"config: {path}", Style.DIM)
        case _:
            console.error(error.message)

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def error_exit_code(error: ReleaseToolError | ConfigError) -> int:
    """Get exit code for an error."""
    match error:
        case MalformedReference() | DirectoryNotFound() | ConfigError():
            return int(ErrorCode.USER_ERROR)
        case VcsUnavailable():
            return int(ErrorCode.ENV_ERROR)
        case NoCommitsFound() | HeadNotTagged():
            return int(ErrorCode.STATE_ERROR)
        case PushRejected() | RegistryPushError():
            return int(ErrorCode.NETWORK_ERROR)
        case ArchiveWriteError():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.USER_ERROR)
