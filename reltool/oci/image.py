"""Single-layer image assembly.

The image is "empty plus one layer": a config blob whose ``rootfs.diff_ids``
lists the layer's uncompressed digest, and a Docker v2 schema 2 manifest
referencing that config and exactly one gzip layer. Both JSON documents are
serialized canonically so that equal layers give equal manifest digests.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from reltool.oci.archive import LayerArchive

MANIFEST_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"
CONFIG_MEDIA_TYPE = "application/vnd.docker.container.image.v1+json"
LAYER_MEDIA_TYPE = "application/vnd.docker.image.rootfs.diff.tar.gzip"

_EPOCH = "1970-01-01T00:00:00Z"
_CHUNK = 1024 * 1024


def sha256_digest(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def _canonical_json(obj: object) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True, slots=True)
class Blob:
    """Content-addressed blob held in memory or in a file."""

    media_type: str
    digest: str
    size: int
    data: bytes | None = None
    path: Path | None = None

    def chunks(self) -> Iterator[bytes]:
        if self.data is not None:
            yield self.data
            return
        if self.path is None:
            raise ValueError(f"blob {self.digest} has no content")
        with self.path.open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK), b""):
                yield chunk

    def read(self) -> bytes:
        return b"".join(self.chunks())

    def descriptor(self) -> dict[str, object]:
        return {"mediaType": self.media_type, "size": self.size, "digest": self.digest}


@dataclass(frozen=True, slots=True)
class Image:
    config: Blob
    layers: tuple[Blob, ...]
    manifest: bytes

    @property
    def manifest_digest(self) -> str:
        return sha256_digest(self.manifest)

    @property
    def manifest_media_type(self) -> str:
        return MANIFEST_MEDIA_TYPE


def config_document(diff_ids: list[str]) -> dict[str, object]:
    return {
        "architecture": "",
        "os": "",
        "created": _EPOCH,
        "config": {},
        "rootfs": {"type": "layers", "diff_ids": diff_ids},
        "history": [{"created": _EPOCH, "created_by": "release-tool oci"}],
    }


def single_layer_image(layer: LayerArchive) -> Image:
    """Build the image description for an archive produced by ``write_layer``."""
    layer_blob = Blob(
        media_type=LAYER_MEDIA_TYPE,
        digest=layer.digest,
        size=layer.size,
        path=layer.path,
    )

    config_bytes = _canonical_json(config_document([layer.diff_id]))
    config_blob = Blob(
        media_type=CONFIG_MEDIA_TYPE,
        digest=sha256_digest(config_bytes),
        size=len(config_bytes),
        data=config_bytes,
    )

    manifest = _canonical_json(
        {
            "schemaVersion": 2,
            "mediaType": MANIFEST_MEDIA_TYPE,
            "config": config_blob.descriptor(),
            "layers": [layer_blob.descriptor()],
        }
    )
    return Image(config=config_blob, layers=(layer_blob,), manifest=manifest)
