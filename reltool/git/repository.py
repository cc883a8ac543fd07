"""Git repository abstraction.

This module provides the Repository class, the subprocess-backed
implementation of ``ReleaseRepository``. All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/checkout"), remote="origin")

    match repo.tags_reachable_from("HEAD"):
        case Ok(tags):
            print(sorted(tags))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from reltool.core.config import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS
from reltool.core.failures import PushRejected, VcsUnavailable
from reltool.core.result import Err, Ok, Result
from reltool.git.contracts import RemoteBranch
from reltool.platform.process import ProcessError
from reltool.platform.process import run as run_process

__all__ = ["Repository"]

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "ls-remote"})


def _lines(stdout: str) -> list[str]:
    return [ln.strip() for ln in stdout.splitlines() if ln.strip()]


def _vcs_error(command: str, e: ProcessError) -> VcsUnavailable:
    return VcsUnavailable(message=f"git {command} failed", hint=e.detail())


class Repository:
    """Git repository rooted at (or containing) ``path``.

    Attributes:
        path: Working directory used for every git invocation
        remote: Name of the remote that branches and tags are pushed to
    """

    def __init__(
        self,
        path: Path,
        *,
        remote: str = "origin",
        timeout: float = GIT_TIMEOUT_SECONDS,
        network_timeout: float = GIT_NETWORK_TIMEOUT_SECONDS,
    ) -> None:
        self.path = path
        self.remote = remote
        self._timeout = timeout
        self._network_timeout = network_timeout

    # -- environment ---------------------------------------------------------

    def is_work_tree(self) -> bool:
        """Check if ``path`` lies inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        return isinstance(result, Ok) and result.value.strip() == "true"

    def has_commits(self) -> bool:
        """False for a freshly initialised repository (unborn HEAD)."""
        return isinstance(self._run(["rev-parse", "--verify", "-q", "HEAD"]), Ok)

    def toplevel(self) -> Result[Path, VcsUnavailable]:
        result = self._run(["rev-parse", "--show-toplevel"])
        if isinstance(result, Err):
            return Err(_vcs_error("rev-parse --show-toplevel", result.error))
        return Ok(Path(result.value.strip()))

    # -- queries -------------------------------------------------------------

    def current_commit(self) -> Result[str, VcsUnavailable]:
        result = self._run(["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return Err(
                VcsUnavailable(
                    message="failed to get current commit", hint=result.error.detail()
                )
            )
        return Ok(result.value.strip())

    def current_branch(self) -> Result[str, VcsUnavailable]:
        """Get current branch name.

        Works on an unborn branch. Returns ``"HEAD"`` when detached.
        """
        result = self._run(["symbolic-ref", "--short", "-q", "HEAD"])
        match result:
            case Ok(stdout):
                return Ok(stdout.strip())
            case Err(e) if e.returncode == 1:
                return Ok("HEAD")
            case Err(e):
                return Err(VcsUnavailable(message="failed to get current branch", hint=e.detail()))

    def tags_pointing_at(self, commit: str) -> Result[frozenset[str], VcsUnavailable]:
        result = self._run(["tag", "--points-at", commit])
        if isinstance(result, Err):
            return Err(_vcs_error("tag --points-at", result.error))
        return Ok(frozenset(_lines(result.value)))

    def tags_reachable_from(self, rev: str) -> Result[frozenset[str], VcsUnavailable]:
        result = self._run(["tag", "--merged", rev])
        if isinstance(result, Err):
            return Err(_vcs_error("tag --merged", result.error))
        return Ok(frozenset(_lines(result.value)))

    def remote_branches(self, pattern: str) -> Result[tuple[RemoteBranch, ...], VcsUnavailable]:
        """List heads on the remote matching ``pattern`` (``git ls-remote --heads``)."""
        result = self._run(["ls-remote", "--heads", self.remote, pattern])
        if isinstance(result, Err):
            return Err(_vcs_error("ls-remote", result.error))

        branches: list[RemoteBranch] = []
        for line in _lines(result.value):
            sha, _, ref = line.partition("\t")
            name = ref.strip().removeprefix("refs/heads/")
            if sha and name:
                branches.append((name, sha.strip()))
        return Ok(tuple(sorted(branches)))

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        # Exit 1 means "not an ancestor"; 128 means the commit is unknown
        # locally, which cannot be an ancestor either.
        return isinstance(self._run(["merge-base", "--is-ancestor", ancestor, descendant]), Ok)

    def last_commit_touching(self, paths: Sequence[str]) -> Result[str | None, VcsUnavailable]:
        result = self._run(["log", "-n1", "--format=%H", "--", *paths])
        if isinstance(result, Err):
            return Err(_vcs_error("log", result.error))
        lines = _lines(result.value)
        return Ok(lines[0] if lines else None)

    # -- mutations -----------------------------------------------------------

    def create_tag(self, name: str, commit: str, *, force: bool) -> Result[None, VcsUnavailable]:
        args = ["tag", *(["-f"] if force else []), name, commit]
        result = self._run(args)
        if isinstance(result, Err):
            return Err(
                VcsUnavailable(message=f"failed to create tag: {name}", hint=result.error.detail())
            )
        return Ok(None)

    def push(self, refspec: str, *, force: bool) -> Result[None, PushRejected]:
        """Push ``refspec`` to the configured remote.

        Forced pushes are only used for tags; branch pushes must fast-forward.
        """
        args = ["push", *(["--force"] if force else []), self.remote, refspec]
        result = self._run(args)
        if isinstance(result, Err):
            return Err(
                PushRejected(
                    ref=refspec,
                    message=f"failed to push {refspec} to {self.remote}",
                    hint=result.error.detail(),
                )
            )
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = self._network_timeout if command in _NETWORK_COMMANDS else self._timeout
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)
