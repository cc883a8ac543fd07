"""Capability interfaces over a version-control repository.

Release logic depends on these protocols, not on ``Repository``, so tests can
drive the publisher and the lookup with an in-memory fake.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from reltool.core.failures import PushRejected, VcsUnavailable
from reltool.core.result import Result

RemoteBranch = tuple[str, str]
"""(branch name without ``refs/heads/``, commit sha)"""


class RepoQuery(Protocol):
    """Read-only history queries. No method has side effects."""

    def is_work_tree(self) -> bool: ...

    def has_commits(self) -> bool:
        """False for an unborn HEAD."""
        ...

    def current_commit(self) -> Result[str, VcsUnavailable]: ...

    def current_branch(self) -> Result[str, VcsUnavailable]:
        """Short branch name, or ``"HEAD"`` when detached."""
        ...

    def tags_pointing_at(self, commit: str) -> Result[frozenset[str], VcsUnavailable]: ...

    def tags_reachable_from(self, rev: str) -> Result[frozenset[str], VcsUnavailable]: ...

    def remote_branches(self, pattern: str) -> Result[tuple[RemoteBranch, ...], VcsUnavailable]:
        """Remote heads matching a glob, ordered by name."""
        ...

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True if ``ancestor`` is reachable from (or equal to) ``descendant``."""
        ...

    def last_commit_touching(self, paths: Sequence[str]) -> Result[str | None, VcsUnavailable]:
        """Newest commit changing any of ``paths`` (all history if empty)."""
        ...


class ReleaseRepository(RepoQuery, Protocol):
    """Queries plus the ref mutations performed by the publisher."""

    @property
    def remote(self) -> str: ...

    def create_tag(
        self, name: str, commit: str, *, force: bool
    ) -> Result[None, VcsUnavailable]: ...

    def push(self, refspec: str, *, force: bool) -> Result[None, PushRejected]: ...
