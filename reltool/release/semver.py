"""Versions and the release-line naming convention.

A release line ``svc`` owns two families of names:

- tags     ``svc/v<major>.<minor>.<patch>``
- branches ``release-svc-<major>.<minor>``

The unscoped line (empty name) uses bare ``v<major>.<minor>.<patch>`` tags and
``release-<major>.<minor>`` branches.

Parsing never raises: a name that does not follow the convention for the
requested line parses to None.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

_NUM = r"(0|[1-9]\d*)"

ReleaseBump = Literal["minor", "patch"]


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseBump) -> Version:
        match kind:
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


ZERO = Version(0, 0, 0)


@lru_cache(maxsize=64)
def _tag_re(line: str) -> re.Pattern[str]:
    prefix = f"{re.escape(line)}/" if line else ""
    return re.compile(rf"^{prefix}v{_NUM}\.{_NUM}\.{_NUM}$")


@lru_cache(maxsize=64)
def _branch_re(line: str) -> re.Pattern[str]:
    infix = f"{re.escape(line)}-" if line else ""
    return re.compile(rf"^release-{infix}{_NUM}\.{_NUM}$")


def tag_name(line: str, version: Version) -> str:
    prefix = f"{line}/" if line else ""
    return f"{prefix}v{version}"


def branch_name(line: str, version: Version) -> str:
    infix = f"{line}-" if line else ""
    return f"release-{infix}{version.major}.{version.minor}"


def branch_pattern(line: str) -> str:
    """Glob matching every release branch of ``line`` (a superset; parse to filter)."""
    infix = f"{line}-" if line else ""
    return f"release-{infix}*"


def parse_tag(line: str, name: str) -> Version | None:
    m = _tag_re(line).match(name.strip().removeprefix("refs/tags/"))
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def strip_remote_prefix(name: str, remote: str = "origin") -> str:
    """Local branch name for a ref listed by ``git branch -a`` or ``ls-remote``.

    Only ``refs/heads/`` and the tracking namespaces of ``remote`` are removed;
    ``feature/release-x-1.2`` is returned unchanged.
    """
    name = name.strip()
    for prefix in (
        "refs/heads/",
        f"refs/remotes/{remote}/",
        f"remotes/{remote}/",
        f"{remote}/",
    ):
        if name.startswith(prefix):
            return name[len(prefix) :]
    return name


def parse_branch(line: str, name: str) -> Version | None:
    """Parse an exact branch name (``refs/heads/`` allowed) of ``line``."""
    m = _branch_re(line).match(name.strip().removeprefix("refs/heads/"))
    if m is None:
        return None
    return Version(int(m.group(1)), int(m.group(2)), 0)


def parse_name(line: str, name: str, remote: str = "origin") -> Version | None:
    """Parse ``name`` as either a tag or a (possibly remote-tracking) branch of ``line``."""
    parsed = parse_tag(line, name)
    if parsed is not None:
        return parsed
    return parse_branch(line, strip_remote_prefix(name, remote))
