"""Failure payloads returned inside ``Err``.

One frozen dataclass per failure kind. ``message`` is the human-facing summary;
``hint`` carries the collaborator's own error text (git stderr, registry
response body) when there is one.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class VcsUnavailable:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class NoCommitsFound:
    message: str = "no commits found for the specified paths"
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class HeadNotTagged:
    line: str
    message: str = "current HEAD is not tagged with a version"
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PushRejected:
    ref: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class DirectoryNotFound:
    path: Path
    message: str = "failed to copy directory contents: directory does not exist"
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ArchiveWriteError:
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RegistryPushError:
    reference: str
    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class MalformedReference:
    reference: str
    message: str
    hint: str | None = None


ReleaseToolError = (
    VcsUnavailable
    | NoCommitsFound
    | HeadNotTagged
    | PushRejected
    | DirectoryNotFound
    | ArchiveWriteError
    | RegistryPushError
    | MalformedReference
)
