"""Directory-to-image packaging: layer archive, image assembly, registry push.

Usage:
    from reltool.oci import ImageReference, write_layer, single_layer_image

    ref = ImageReference.parse("localhost:5000/site:latest").unwrap()
"""

from reltool.oci.archive import PLACEHOLDER, LayerArchive, substitute, write_layer
from reltool.oci.image import Blob, Image, single_layer_image
from reltool.oci.reference import ImageReference
from reltool.oci.registry import HttpRegistryClient, MockRegistryClient, RegistryClient

__all__ = [
    "PLACEHOLDER",
    "Blob",
    "HttpRegistryClient",
    "Image",
    "ImageReference",
    "LayerArchive",
    "MockRegistryClient",
    "RegistryClient",
    "single_layer_image",
    "substitute",
    "write_layer",
]
