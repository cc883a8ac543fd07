"""Tests for version lookup at HEAD."""

from __future__ import annotations

from reltool.core.failures import HeadNotTagged
from reltool.core.result import Err, Ok
from reltool.release.lookup import version_at_head
from reltool.release.semver import Version
from reltool.test.release._fake_repo import FakeRepo


def _repo() -> FakeRepo:
    return FakeRepo(
        commits=["c1", "c2"],
        tags={"service-a/v1.0.0": "c1", "service-b/v2.3.4": "c2"},
    )


def test_tag_on_head() -> None:
    assert version_at_head(_repo(), "service-b") == Ok(Version(2, 3, 4))


def test_tag_on_ancestor_does_not_count() -> None:
    result = version_at_head(_repo(), "service-a")

    assert isinstance(result, Err)
    assert isinstance(result.error, HeadNotTagged)
    assert result.error.message == "current HEAD is not tagged with a version"


def test_greatest_version_wins() -> None:
    repo = FakeRepo(commits=["c1"], tags={"svc/v1.2.0": "c1", "svc/v1.10.0": "c1", "svc/v1.9.9": "c1"})
    assert version_at_head(repo, "svc") == Ok(Version(1, 10, 0))


def test_other_lines_on_head_ignored() -> None:
    repo = FakeRepo(commits=["c1"], tags={"svc-x/v3.0.0": "c1", "v4.0.0": "c1"})
    assert isinstance(version_at_head(repo, "svc"), Err)


def test_unscoped_line() -> None:
    repo = FakeRepo(commits=["c1"], tags={"v4.0.0": "c1", "svc/v3.0.0": "c1"})
    assert version_at_head(repo, "") == Ok(Version(4, 0, 0))
