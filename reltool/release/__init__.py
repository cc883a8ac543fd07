"""Release versioning: naming convention, resolution, publishing, lookup."""

from __future__ import annotations

from reltool.release.lookup import version_at_head
from reltool.release.publisher import (
    PublishPlan,
    PublishState,
    execute_publish,
    plan_publish,
    publish,
    resolve_publish,
)
from reltool.release.resolver import latest_version
from reltool.release.semver import Version, branch_name, parse_branch, parse_tag, tag_name

__all__ = [
    "PublishPlan",
    "PublishState",
    "Version",
    "branch_name",
    "execute_publish",
    "latest_version",
    "parse_branch",
    "parse_tag",
    "plan_publish",
    "publish",
    "resolve_publish",
    "tag_name",
    "version_at_head",
]
