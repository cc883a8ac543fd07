"""Image reference parsing: ``[registry/]repository[:tag]``.

Follows the familiar docker rules:

- the first path component is a registry when it contains ``.`` or ``:`` or
  is ``localhost``; otherwise the registry is Docker Hub
- single-component Docker Hub repositories live under ``library/``
- the tag defaults to ``latest``

Digest references (``@sha256:...``) are rejected: a push needs a tag.
"""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass, field, replace

from reltool.core.failures import MalformedReference
from reltool.core.result import Err, Ok, Result

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_REGISTRY_RE = re.compile(r"^[a-zA-Z0-9.-]+(?::\d+)?$|^\[[0-9a-fA-F:]+\](?::\d+)?$")


@dataclass(frozen=True, slots=True)
class ImageReference:
    registry: str
    repository: str
    tag: str = DEFAULT_TAG
    # Name as the user typed it (without tag), for messages.
    written: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"

    def display(self) -> str:
        if self.written:
            return f"{self.written}:{self.tag}"
        return str(self)

    @property
    def host(self) -> str:
        """Registry host without port."""
        if self.registry.startswith("["):
            return self.registry[1 : self.registry.index("]")]
        return self.registry.rsplit(":", 1)[0] if ":" in self.registry else self.registry

    def with_tag(self, tag: str) -> ImageReference:
        return replace(self, tag=tag)

    def is_local(self) -> bool:
        """True for registries that are conventionally served over plain http."""
        host = self.host
        if host == "localhost" or host.endswith(".local"):
            return True
        try:
            ip = ipaddress.ip_address(host)
        except ValueError:
            return False
        return ip.is_loopback or ip.is_private

    @classmethod
    def parse(cls, text: str) -> Result[ImageReference, MalformedReference]:
        raw = text.strip()

        def bad(message: str) -> Err[MalformedReference]:
            return Err(MalformedReference(reference=text, message=message))

        if not raw:
            return bad("failed to parse image reference: empty reference")
        if "@" in raw:
            return bad(f"failed to parse image reference: digest references cannot be pushed: {raw}")

        name, tag = raw, DEFAULT_TAG
        slash = raw.rfind("/")
        colon = raw.rfind(":")
        if colon > slash:
            name, tag = raw[:colon], raw[colon + 1 :]
            if not _TAG_RE.match(tag):
                return bad(f"failed to parse image reference: invalid tag {tag!r}")

        parts = name.split("/")
        first = parts[0]
        if len(parts) > 1 and ("." in first or ":" in first or first == "localhost"):
            registry, path = first, parts[1:]
            if not _REGISTRY_RE.match(registry):
                return bad(f"failed to parse image reference: invalid registry {registry!r}")
        else:
            registry, path = DEFAULT_REGISTRY, parts
            if len(path) == 1:
                path = ["library", *path]

        for component in path:
            if not _COMPONENT_RE.match(component):
                return bad(
                    f"failed to parse image reference: invalid repository component {component!r}"
                )

        return Ok(cls(registry=registry, repository="/".join(path), tag=tag, written=name))
