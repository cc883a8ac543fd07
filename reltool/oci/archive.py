"""Deterministic layer archive with version substitution.

The directory tree is written as a gzip-compressed tar stream:

- entries are sorted by relative POSIX path
- directories are header-only entries, symlinks keep their target
- every ``$(version)`` in a regular file is replaced before writing, and the
  header size is the length of the rewritten content
- ownership and timestamps are zeroed (uid/gid 0, mtime 0, gzip mtime 0), so
  the same tree and version always give the same layer digest

The compressed digest and the uncompressed digest (the image ``diff_id``) are
computed while writing, in a single pass.
"""

from __future__ import annotations

import gzip
import hashlib
import io
import os
import stat
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from reltool.core.failures import ArchiveWriteError
from reltool.core.result import Err, Ok, Result

PLACEHOLDER = "$(version)"

__all__ = ["PLACEHOLDER", "LayerArchive", "collect_entries", "substitute", "write_layer"]


@dataclass(frozen=True, slots=True)
class LayerArchive:
    """A written ``.tar.gz`` layer.

    Attributes:
        path: Location of the compressed archive
        digest: ``sha256:`` digest of the compressed bytes
        diff_id: ``sha256:`` digest of the uncompressed tar stream
        size: Compressed size in bytes
        entries: Archive member names, in archive order
    """

    path: Path
    digest: str
    diff_id: str
    size: int
    entries: tuple[str, ...]


class _Writable(Protocol):
    def write(self, data: bytes, /) -> int: ...


class _DigestWriter(io.RawIOBase):
    """Write-through sink that hashes and counts what passes through it."""

    def __init__(self, sink: _Writable) -> None:
        super().__init__()
        self._sink = sink
        self._sha = hashlib.sha256()
        self.size = 0

    def writable(self) -> bool:
        return True

    def write(self, data: bytes) -> int:  # type: ignore[override]
        view = bytes(data)
        self._sha.update(view)
        self.size += len(view)
        self._sink.write(view)
        return len(view)

    @property
    def digest(self) -> str:
        return f"sha256:{self._sha.hexdigest()}"


def substitute(content: bytes, version: str) -> bytes:
    """Replace every literal ``$(version)`` in ``content``."""
    return content.replace(PLACEHOLDER.encode(), version.encode())


def collect_entries(root: Path) -> list[tuple[str, Path]]:
    """All paths under ``root`` as (relative POSIX name, absolute path), sorted by name.

    Symlinks are listed but never followed.
    """

    def _raise(e: OSError) -> None:
        raise e

    out: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise, followlinks=False):
        base = Path(dirpath)
        for name in (*dirnames, *filenames):
            p = base / name
            out.append((p.relative_to(root).as_posix(), p))
    out.sort(key=lambda item: item[0])
    return out


def _normalised(info: tarfile.TarInfo, mode: int) -> tarfile.TarInfo:
    info.mode = stat.S_IMODE(mode)
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    info.mtime = 0
    return info


def _add_entry(tar: tarfile.TarFile, name: str, path: Path, version: str) -> bool:
    """Write one entry. Returns False for skipped types (sockets, fifos, devices)."""
    st = path.lstat()

    if stat.S_ISDIR(st.st_mode):
        info = _normalised(tarfile.TarInfo(name), st.st_mode)
        info.type = tarfile.DIRTYPE
        tar.addfile(info)
        return True

    if stat.S_ISLNK(st.st_mode):
        info = _normalised(tarfile.TarInfo(name), st.st_mode)
        info.type = tarfile.SYMTYPE
        info.linkname = os.readlink(path)
        tar.addfile(info)
        return True

    if stat.S_ISREG(st.st_mode):
        content = substitute(path.read_bytes(), version)
        info = _normalised(tarfile.TarInfo(name), st.st_mode)
        info.type = tarfile.REGTYPE
        info.size = len(content)
        tar.addfile(info, io.BytesIO(content))
        return True

    return False


def write_layer(
    root: Path, dest: Path, *, version: str
) -> Result[LayerArchive, ArchiveWriteError]:
    """Archive ``root`` into ``dest`` (gzip tar), substituting ``version``.

    Args:
        root: Directory to archive (its contents become the layer root)
        dest: Output file; created or truncated
        version: Replacement for ``$(version)``
    """
    written: list[str] = []
    try:
        entries = collect_entries(root)
        with dest.open("wb") as raw:
            compressed = _DigestWriter(raw)
            with gzip.GzipFile(filename="", mode="wb", fileobj=compressed, mtime=0) as gz:
                uncompressed = _DigestWriter(gz)
                with tarfile.open(fileobj=uncompressed, mode="w|", format=tarfile.PAX_FORMAT) as tar:
                    for name, path in entries:
                        if _add_entry(tar, name, path, version):
                            written.append(name)
    except (OSError, tarfile.TarError) as e:
        return Err(ArchiveWriteError(message="failed to create tarball", hint=str(e)))

    return Ok(
        LayerArchive(
            path=dest,
            digest=compressed.digest,
            diff_id=uncompressed.digest,
            size=compressed.size,
            entries=tuple(written),
        )
    )
