from __future__ import annotations

from reltool.core.failures import HeadNotTagged, VcsUnavailable
from reltool.core.result import Err, Ok, Result
from reltool.git.contracts import RepoQuery
from reltool.release.semver import Version, parse_tag


def version_at_head(repo: RepoQuery, line: str) -> Result[Version, HeadNotTagged | VcsUnavailable]:
    """Version of ``line`` tagged on the exact HEAD commit.

    Tags on ancestors do not count. When HEAD carries several tags of the line
    (re-tagged history), the greatest version wins.
    """
    head = repo.current_commit()
    if isinstance(head, Err):
        return head

    tags = repo.tags_pointing_at(head.value)
    if isinstance(tags, Err):
        return tags

    versions = [v for v in (parse_tag(line, t) for t in tags.value) if v is not None]
    if not versions:
        return Err(HeadNotTagged(line=line))
    return Ok(max(versions))
