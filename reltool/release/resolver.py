from __future__ import annotations

from collections.abc import Iterable

from reltool.release.semver import ZERO, Version, parse_name


def parse_versions(line: str, candidates: Iterable[str], remote: str = "origin") -> list[Version]:
    """Parse every candidate tag/branch name of ``line``, skipping the rest."""
    versions: list[Version] = []
    for name in candidates:
        v = parse_name(line, name, remote)
        if v is not None:
            versions.append(v)
    return sorted(versions)


def latest_version(line: str, candidates: Iterable[str], remote: str = "origin") -> Version:
    """Greatest version of ``line`` among ``candidates``, or 0.0.0 when none match.

    Unrelated tags and branches, and those of other release lines, are ignored.
    Tracking prefixes are only stripped for ``remote``.
    """
    versions = parse_versions(line, candidates, remote)
    return versions[-1] if versions else ZERO
