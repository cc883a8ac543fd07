"""Tests for single-layer image assembly."""

from __future__ import annotations

import json
from pathlib import Path

from reltool.core.result import Ok
from reltool.oci.archive import LayerArchive, write_layer
from reltool.oci.image import (
    CONFIG_MEDIA_TYPE,
    LAYER_MEDIA_TYPE,
    MANIFEST_MEDIA_TYPE,
    Blob,
    sha256_digest,
    single_layer_image,
)


def _layer(tmp_path: Path) -> LayerArchive:
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text("<p>$(version)</p>", encoding="utf-8")
    result = write_layer(root, tmp_path / "layer.tar.gz", version="0.2.0")
    assert isinstance(result, Ok)
    return result.value


def test_manifest_references_config_and_one_layer(tmp_path: Path) -> None:
    layer = _layer(tmp_path)

    image = single_layer_image(layer)
    manifest = json.loads(image.manifest)

    assert manifest["schemaVersion"] == 2
    assert manifest["mediaType"] == MANIFEST_MEDIA_TYPE
    assert manifest["config"] == {
        "mediaType": CONFIG_MEDIA_TYPE,
        "size": image.config.size,
        "digest": image.config.digest,
    }
    assert manifest["layers"] == [
        {"mediaType": LAYER_MEDIA_TYPE, "size": layer.size, "digest": layer.digest}
    ]


def test_config_lists_diff_id(tmp_path: Path) -> None:
    layer = _layer(tmp_path)

    image = single_layer_image(layer)
    config = json.loads(image.config.read())

    assert config["rootfs"] == {"type": "layers", "diff_ids": [layer.diff_id]}
    assert image.config.digest == sha256_digest(image.config.read())


def test_same_layer_same_manifest_digest(tmp_path: Path) -> None:
    layer = _layer(tmp_path)
    assert single_layer_image(layer).manifest_digest == single_layer_image(layer).manifest_digest


def test_layer_blob_streams_from_file(tmp_path: Path) -> None:
    layer = _layer(tmp_path)

    image = single_layer_image(layer)

    (blob,) = image.layers
    assert blob.path == layer.path
    assert blob.read() == layer.path.read_bytes()


def test_blob_in_memory() -> None:
    blob = Blob(media_type="x", digest=sha256_digest(b"abc"), size=3, data=b"abc")
    assert list(blob.chunks()) == [b"abc"]
    assert blob.descriptor() == {"mediaType": "x", "size": 3, "digest": blob.digest}
