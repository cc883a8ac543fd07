"""Tests for error presentation and exit code mapping."""

from __future__ import annotations

from pathlib import Path

import pytest

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
from reltool.output.console import MockConsole
from reltool.output.errors import error_exit_code, print_error


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (MalformedReference(reference="x@y", message="bad"), ErrorCode.USER_ERROR),
        (DirectoryNotFound(path=Path("/nope")), ErrorCode.USER_ERROR),
        (ConfigError("bad config"), ErrorCode.USER_ERROR),
        (VcsUnavailable(message="git missing"), ErrorCode.ENV_ERROR),
        (NoCommitsFound(), ErrorCode.STATE_ERROR),
        (HeadNotTagged(line="svc"), ErrorCode.STATE_ERROR),
        (PushRejected(ref="refs/heads/x", message="rejected"), ErrorCode.NETWORK_ERROR),
        (RegistryPushError(reference="r", message="failed"), ErrorCode.NETWORK_ERROR),
        (ArchiveWriteError(message="failed to create tarball"), ErrorCode.IO_ERROR),
    ],
)
def test_error_exit_code(error: ReleaseToolError | ConfigError, code: ErrorCode) -> None:
    assert error_exit_code(error) == int(code)


def test_head_not_tagged_message() -> None:
    console = MockConsole()
    print_error(HeadNotTagged(line="svc"), console)
    assert console.messages[0] == "error: current HEAD is not tagged with a version"


def test_directory_not_found_includes_path() -> None:
    console = MockConsole()
    print_error(DirectoryNotFound(path=Path("/missing/dir")), console)
    assert console.messages[0] == (
        "error: failed to copy directory contents: directory does not exist: /missing/dir"
    )


def test_hint_is_printed() -> None:
    console = MockConsole()
    print_error(PushRejected(ref="refs/heads/x", message="push failed", hint="non-fast-forward"), console)
    assert console.messages == ["error: push failed", "hint: non-fast-forward"]
