"""Tests for latest-version resolution."""

from __future__ import annotations

from reltool.release.resolver import latest_version, parse_versions
from reltool.release.semver import ZERO, Version


def test_empty_is_zero() -> None:
    assert latest_version("svc", []) == ZERO


def test_only_foreign_names_is_zero() -> None:
    assert latest_version("svc", ["main", "other/v9.9.9", "release-other-3.0", "v1.0.0"]) == ZERO


def test_greatest_of_tags_and_branches() -> None:
    names = ["svc/v0.1.0", "svc/v0.1.3", "release-svc-0.2", "svc/v0.10.0", "release-svc-0.9"]
    assert latest_version("svc", names) == Version(0, 10, 0)


def test_foreign_lines_are_ignored() -> None:
    names = ["a/v0.1.0", "a-b/v5.0.0", "release-a-b-7.0"]
    assert latest_version("a", names) == Version(0, 1, 0)


def test_remote_tracking_prefixes() -> None:
    names = ["origin/release-svc-1.1", "refs/tags/svc/v1.0.4"]
    assert latest_version("svc", names) == Version(1, 1, 0)


def test_parse_versions_sorted() -> None:
    assert parse_versions("", ["v1.0.0", "v0.2.0", "junk", "release-0.3"]) == [
        Version(0, 2, 0),
        Version(0, 3, 0),
        Version(1, 0, 0),
    ]


def test_other_remote_prefixes_are_not_stripped() -> None:
    names = ["upstream/release-svc-2.0", "feature/release-svc-3.0", "release-svc-1.0"]
    assert latest_version("svc", names) == Version(1, 0, 0)
    assert latest_version("svc", names, remote="upstream") == Version(2, 0, 0)
