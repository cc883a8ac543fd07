"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from reltool.core.config import ConfigError
from reltool.core.failures import ReleaseToolError
from reltool.core.result import Err, Result
from reltool.output.errors import error_exit_code, print_error

if TYPE_CHECKING:
    from reltool.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, ReleaseToolError | ConfigError], ctx: CLIContext) -> T:
    """Return the value of an Ok result; print the error and exit otherwise.

    The exit code is derived from the error type (see ``error_exit_code``).
    """
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        exit_with_code(error_exit_code(result.error))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
