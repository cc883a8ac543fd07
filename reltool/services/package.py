"""Directory-to-image packaging service.

Pipeline for ``release-tool oci IMAGE DIRECTORY``:

1. check the directory and parse the image reference (no side effects yet)
2. resolve the version from the tags reachable from HEAD of the directory's
   repository, unless an explicit version is given
3. write the layer archive into a scratch directory, substituting the version
4. assemble the single-layer image
5. push under the reference's own tag, then under the version tag

The scratch directory is removed on every exit path.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from reltool.core.failures import (
    ArchiveWriteError,
    DirectoryNotFound,
    MalformedReference,
    RegistryPushError,
    VcsUnavailable,
)
from reltool.core.result import Err, Ok, Result
from reltool.git.contracts import RepoQuery
from reltool.oci.archive import write_layer
from reltool.oci.image import single_layer_image
from reltool.oci.reference import ImageReference
from reltool.oci.registry import RegistryClient
from reltool.output.console import ConsoleProtocol, Style
from reltool.release.semver import ZERO, Version, parse_tag

PackageError = (
    DirectoryNotFound | MalformedReference | VcsUnavailable | ArchiveWriteError | RegistryPushError
)

__all__ = [
    "PackageError",
    "PackageRequest",
    "PackageResult",
    "package_directory",
    "resolve_directory",
    "resolve_package_version",
]


@dataclass(frozen=True, slots=True)
class PackageRequest:
    image: str
    directory: Path
    line: str = ""
    version: Version | None = None


@dataclass(frozen=True, slots=True)
class PackageResult:
    references: tuple[ImageReference, ...]
    version: Version
    digest: str
    entries: tuple[str, ...]


def resolve_directory(directory: Path) -> Result[Path, DirectoryNotFound]:
    path = directory.expanduser().resolve()
    if not path.is_dir():
        return Err(DirectoryNotFound(path=path))
    return Ok(path)


def resolve_package_version(
    repo: RepoQuery, *, line: str, console: ConsoleProtocol
) -> Result[Version, VcsUnavailable]:
    """Latest version of ``line`` reachable from HEAD, or 0.0.0.

    A directory outside any work tree, an unborn HEAD and a history without
    matching tags all resolve to 0.0.0.
    """
    if not repo.is_work_tree():
        console.warning("not a git repository; using version 0.0.0")
        return Ok(ZERO)
    if not repo.has_commits():
        console.warning("repository has no commits; using version 0.0.0")
        return Ok(ZERO)

    tags = repo.tags_reachable_from("HEAD")
    if isinstance(tags, Err):
        return tags

    versions = [v for v in (parse_tag(line, t) for t in tags.value) if v is not None]
    if not versions:
        console.warning("no version tags reachable from HEAD; using version 0.0.0")
        return Ok(ZERO)
    return Ok(max(versions))


def package_directory(
    request: PackageRequest,
    *,
    registry: RegistryClient,
    repo_factory: Callable[[Path], RepoQuery],
    console: ConsoleProtocol,
) -> Result[PackageResult, PackageError]:
    """Package ``request.directory`` as a single-layer image and push it twice."""
    directory = resolve_directory(request.directory)
    if isinstance(directory, Err):
        return directory

    parsed = ImageReference.parse(request.image)
    if isinstance(parsed, Err):
        return parsed
    ref = parsed.value

    if request.version is not None:
        version = request.version
    else:
        resolved = resolve_package_version(
            repo_factory(directory.value), line=request.line, console=console
        )
        if isinstance(resolved, Err):
            return resolved
        version = resolved.value
    console.print(f"version: {version}", Style.DIM)

    with tempfile.TemporaryDirectory(prefix="release-tool-") as scratch:
        layer = write_layer(directory.value, Path(scratch) / "layer.tar.gz", version=str(version))
        if isinstance(layer, Err):
            return layer
        console.print(
            f"layer {layer.value.digest} ({layer.value.size} bytes, "
            f"{len(layer.value.entries)} entries)",
            Style.DIM,
        )

        image = single_layer_image(layer.value)
        targets = (ref, ref.with_tag(str(version)))
        digest = image.manifest_digest
        for target in targets:
            pushed = registry.push(image, target)
            if isinstance(pushed, Err):
                return pushed
            digest = pushed.value
            console.success(f"Successfully published directory as OCI image: {target.display()}")

    return Ok(
        PackageResult(
            references=targets,
            version=version,
            digest=digest,
            entries=layer.value.entries,
        )
    )
