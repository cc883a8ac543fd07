"""Git access layer.

Usage:
    from reltool.git import Repository

    repo = Repository(Path.cwd(), remote="origin")
    sha = repo.current_commit().unwrap()
"""

from reltool.git.contracts import ReleaseRepository, RemoteBranch, RepoQuery
from reltool.git.repository import Repository

__all__ = [
    "ReleaseRepository",
    "RemoteBranch",
    "RepoQuery",
    "Repository",
]
