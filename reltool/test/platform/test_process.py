"""Tests for reltool.platform.process module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from reltool.core.result import Err, Ok
from reltool.platform.process import ProcessError, run


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "-C", "/repo", "push", "origin", "v1"),
            returncode=1,
            stdout="",
            stderr="error",
        )
        assert str(error) == "git -C /repo ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        error = ProcessError(("git",), 1, "out", " rejected \n")
        assert error.detail() == "rejected"

    def test_detail_falls_back_to_stdout_then_summary(self) -> None:
        assert ProcessError(("git",), 1, "out\n", "").detail() == "out"
        assert ProcessError(("git",), 2, "", "").detail() == "git failed (exit 2)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    """Test run function."""

    @patch("subprocess.run")
    def test_success_returns_stdout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "hello\n", "")

        result = run(["git", "--version"], cwd=tmp_path, timeout=5.0)

        assert result == Ok("hello\n")
        _, kwargs = mock_run.call_args
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["timeout"] == 5.0
        assert kwargs["capture_output"] is True

    @patch("subprocess.run")
    def test_failure_returns_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = subprocess.CompletedProcess(["git"], 42, "", "bad")

        result = run(["git", "nope"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42
        assert result.error.stderr == "bad"
        assert result.error.command == ("git", "nope")

    @patch("subprocess.run")
    def test_timeout(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["git"], timeout=1.0)

        result = run(["git", "fetch"], cwd=tmp_path, timeout=1.0)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
