"""Release publishing state machine.

The state is decided by the branch that is checked out:

- ON_RELEASE_BRANCH (``release-<line>-M.m``): bump the patch of the latest
  ``M.m.*`` version, push the branch as-is, tag the commit.
- ON_MAINLINE (anything else): bump the minor of the latest version, create
  ``release-<line>-M.<m+1>`` at the commit on the remote, tag the commit.

Branch pushes are never forced, so an existing release branch with a different
history makes the publish fail. Tag pushes are always forced: release tags are
movable markers.

Only history reachable from the published commit counts toward the latest
version: tags merged into it, remote release branches whose head is one of its
ancestors, and the current release branch itself.

A commit that already carries a tag of the line (in the release branch's
series, when on one) is published again under that same version, so a re-run
after a failed push completes the interrupted release instead of starting a
new one.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

from reltool.core.failures import NoCommitsFound, PushRejected, VcsUnavailable
from reltool.core.result import Err, Ok, Result
from reltool.git.contracts import ReleaseRepository, RepoQuery
from reltool.output.console import ConsoleProtocol, Style
from reltool.release.resolver import latest_version, parse_versions
from reltool.release.semver import (
    ZERO,
    Version,
    branch_name,
    branch_pattern,
    parse_branch,
    parse_tag,
    tag_name,
)

PublishError = NoCommitsFound | PushRejected | VcsUnavailable


class PublishState(Enum):
    ON_RELEASE_BRANCH = "on_release_branch"
    ON_MAINLINE = "on_mainline"


@dataclass(frozen=True, slots=True)
class PublishPlan:
    """Everything decided before any ref is touched.

    ``republish`` is set when ``version`` comes from a tag already on
    ``commit``. ``push_branch`` is False when the remote release branch
    already contains ``commit``.
    """

    line: str
    state: PublishState
    commit: str
    current_branch: str
    latest: Version
    version: Version
    branch: str
    tag: str
    republish: bool = False
    push_branch: bool = True

    @property
    def branch_refspec(self) -> str:
        if self.state is PublishState.ON_RELEASE_BRANCH:
            return f"refs/heads/{self.branch}"
        return f"{self.commit}:refs/heads/{self.branch}"

    @property
    def tag_refspec(self) -> str:
        return f"refs/tags/{self.tag}"


def detect_state(line: str, current_branch: str) -> PublishState:
    if parse_branch(line, current_branch) is not None:
        return PublishState.ON_RELEASE_BRANCH
    return PublishState.ON_MAINLINE


def plan_publish(
    *,
    line: str,
    current_branch: str,
    commit: str,
    candidates: Iterable[str],
    tags_at_commit: Iterable[str] = (),
    remote: str = "origin",
) -> PublishPlan:
    """Decide the next version from the names visible at ``commit``.

    Pure function: ``candidates`` must already be limited to history reachable
    from ``commit``, and ``tags_at_commit`` to the tags pointing at it.
    """
    state = detect_state(line, current_branch)
    existing = [v for v in (parse_tag(line, t) for t in tags_at_commit) if v is not None]

    if state is PublishState.ON_RELEASE_BRANCH:
        floor = parse_branch(line, current_branch) or ZERO
        series = (floor.major, floor.minor)
        same_series = [
            v for v in parse_versions(line, candidates, remote) if (v.major, v.minor) == series
        ]
        latest = max([floor, *same_series])
        existing = [v for v in existing if (v.major, v.minor) == series]
        version = max(existing) if existing else latest.bump("patch")
        branch = current_branch
    else:
        latest = latest_version(line, candidates, remote)
        version = max(existing) if existing else latest.bump("minor")
        branch = branch_name(line, version)

    return PublishPlan(
        line=line,
        state=state,
        commit=commit,
        current_branch=current_branch,
        latest=latest,
        version=version,
        branch=branch,
        tag=tag_name(line, version),
        republish=bool(existing),
    )


def _target_commit(repo: RepoQuery, paths: Sequence[str]) -> Result[str, PublishError]:
    if not repo.is_work_tree():
        return Err(VcsUnavailable(message="not a git repository"))
    if not repo.has_commits():
        return Err(NoCommitsFound(message="no commits found in repository"))
    if not paths:
        return repo.current_commit()

    found = repo.last_commit_touching(paths)
    if isinstance(found, Err):
        return found
    if found.value is None:
        return Err(NoCommitsFound(hint=", ".join(paths)))
    return Ok(found.value)


def resolve_publish(
    repo: RepoQuery,
    *,
    line: str,
    paths: Sequence[str] = (),
    remote: str = "origin",
) -> Result[PublishPlan, PublishError]:
    """Query the repository and plan the next publish of ``line``."""
    commit = _target_commit(repo, paths)
    if isinstance(commit, Err):
        return commit

    current = repo.current_branch()
    if isinstance(current, Err):
        return current

    tags = repo.tags_reachable_from(commit.value)
    if isinstance(tags, Err):
        return tags

    at_commit = repo.tags_pointing_at(commit.value)
    if isinstance(at_commit, Err):
        return at_commit

    remote_heads = repo.remote_branches(branch_pattern(line))
    if isinstance(remote_heads, Err):
        return remote_heads

    candidates: set[str] = set(tags.value)
    for name, sha in remote_heads.value:
        if parse_branch(line, name) is None:
            continue
        if repo.is_ancestor(sha, commit.value):
            candidates.add(name)

    plan = plan_publish(
        line=line,
        current_branch=current.value,
        commit=commit.value,
        candidates=candidates,
        tags_at_commit=at_commit.value,
        remote=remote,
    )

    if plan.republish and plan.state is PublishState.ON_MAINLINE:
        head = dict(remote_heads.value).get(plan.branch)
        if head is not None and repo.is_ancestor(plan.commit, head):
            plan = replace(plan, push_branch=False)
    return Ok(plan)


def execute_publish(
    repo: ReleaseRepository,
    plan: PublishPlan,
    *,
    console: ConsoleProtocol,
) -> Result[PublishPlan, PublishError]:
    """Push the branch, then create and force-push the tag.

    Messages for completed steps stay on the console even if a later step fails.
    """
    if plan.push_branch:
        console.print(f"git push {repo.remote} {plan.branch_refspec}", Style.DIM)
        pushed = repo.push(plan.branch_refspec, force=False)
        if isinstance(pushed, Err):
            return pushed
        if plan.state is PublishState.ON_MAINLINE:
            console.success(f"Pushed new release branch: {plan.branch}")
        else:
            console.success(f"Pushed release branch: {plan.branch}")
    else:
        console.print(f"{plan.branch} already contains {plan.commit}", Style.DIM)

    console.print(f"git tag -f {plan.tag} {plan.commit}", Style.DIM)
    tagged = repo.create_tag(plan.tag, plan.commit, force=True)
    if isinstance(tagged, Err):
        return tagged

    console.print(f"git push --force {repo.remote} {plan.tag_refspec}", Style.DIM)
    pushed = repo.push(plan.tag_refspec, force=True)
    if isinstance(pushed, Err):
        return pushed
    console.success(f"Created and pushed tag: {plan.tag}")

    return Ok(plan)


def publish(
    repo: ReleaseRepository,
    *,
    line: str,
    paths: Sequence[str] = (),
    console: ConsoleProtocol,
) -> Result[PublishPlan, PublishError]:
    plan = resolve_publish(repo, line=line, paths=paths, remote=repo.remote)
    if isinstance(plan, Err):
        return plan

    p = plan.value
    if p.republish:
        console.print(f"{p.commit} is already tagged {p.tag}; publishing it again", Style.DIM)
    console.print(
        f"{p.state.value}: {p.current_branch} latest={p.latest} next={p.version}", Style.DIM
    )
    return execute_publish(repo, p, console=console)
