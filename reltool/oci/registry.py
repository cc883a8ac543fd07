"""Registry client abstraction for image pushes.

This module provides:
- RegistryClient: Protocol for pushing an image (injectable for tests)
- HttpRegistryClient: OCI distribution API client using urllib
- MockRegistryClient: In-memory implementation for testing

Push sequence (per reference): for each layer and the config blob,
``HEAD /v2/<repo>/blobs/<digest>``; on 404, ``POST /v2/<repo>/blobs/uploads/``
then a monolithic ``PUT <location>?digest=<digest>``. Finally
``PUT /v2/<repo>/manifests/<tag>``.

Bearer-token and Basic authentication challenges are answered once per
repository. Nothing is retried.
"""

from __future__ import annotations

import base64
import json
import re
import ssl
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from email.message import Message
from typing import Protocol, runtime_checkable

from reltool.core.failures import RegistryPushError
from reltool.core.result import Err, Ok, Result
from reltool.core.structured import as_str_dict, get_str
from reltool.oci.image import Blob, Image
from reltool.oci.reference import ImageReference
from reltool.output.console import ConsoleProtocol, Style

__all__ = [
    "HttpRegistryClient",
    "MockRegistryClient",
    "RegistryClient",
]

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


@runtime_checkable
class RegistryClient(Protocol):
    """Protocol for image pushes."""

    def push(self, image: Image, ref: ImageReference) -> Result[str, RegistryPushError]:
        """Push ``image`` under ``ref`` and return the manifest digest."""
        ...


@dataclass(frozen=True, slots=True)
class _Response:
    status: int
    headers: Message
    body: bytes


def _parse_challenge(header: str) -> tuple[str, dict[str, str]]:
    scheme, _, rest = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM_RE.findall(rest))


class _BlobStream:
    """File-like wrapper so urllib can stream a blob body."""

    def __init__(self, blob: Blob) -> None:
        self._chunks = blob.chunks()
        self._pending = b""
        self._pos = 0

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            rest = self._pending[self._pos :] + b"".join(self._chunks)
            self._pending, self._pos = b"", 0
            return rest
        while self._pos >= len(self._pending):
            chunk = next(self._chunks, None)
            if chunk is None:
                return b""
            self._pending, self._pos = chunk, 0
        out = self._pending[self._pos : self._pos + size]
        self._pos += len(out)
        return out


class HttpRegistryClient:
    """Registry client speaking the OCI distribution API over urllib.

    Handles:
    - http for insecure or local registries (localhost, loopback, private IPs)
    - HTTPS with system certificates otherwise
    - Bearer token and Basic auth challenges
    - Skipping blobs the registry already has
    """

    def __init__(
        self,
        *,
        insecure: bool = False,
        timeout: float = 60.0,
        username: str | None = None,
        password: str | None = None,
        user_agent: str = "release-tool/0.3.0",
        console: ConsoleProtocol | None = None,
    ) -> None:
        self.insecure = insecure
        self.timeout = timeout
        self.user_agent = user_agent
        self._username = username
        self._password = password
        self._console = console
        self._ssl_context = ssl.create_default_context()
        self._auth: dict[tuple[str, str], str] = {}

    # -- public --------------------------------------------------------------

    def push(self, image: Image, ref: ImageReference) -> Result[str, RegistryPushError]:
        for blob in (*image.layers, image.config):
            uploaded = self._ensure_blob(ref, blob)
            if isinstance(uploaded, Err):
                return uploaded

        url = self._url(ref, f"manifests/{urllib.parse.quote(ref.tag, safe='')}")
        result = self._request(
            "PUT",
            url,
            ref=ref,
            headers={"Content-Type": image.manifest_media_type},
            body=image.manifest,
        )
        if isinstance(result, Err):
            return result
        if result.value.status not in (200, 201, 202):
            return Err(self._unexpected(ref, "manifest upload", result.value))

        return Ok(result.value.headers.get("Docker-Content-Digest") or image.manifest_digest)

    # -- blobs ---------------------------------------------------------------

    def _ensure_blob(self, ref: ImageReference, blob: Blob) -> Result[None, RegistryPushError]:
        head = self._request("HEAD", self._url(ref, f"blobs/{blob.digest}"), ref=ref)
        if isinstance(head, Err):
            return head
        if head.value.status == 200:
            self._trace(f"blob {blob.digest[:19]} exists")
            return Ok(None)

        start = self._request("POST", self._url(ref, "blobs/uploads/"), ref=ref, body=b"")
        if isinstance(start, Err):
            return start
        if start.value.status != 202:
            return Err(self._unexpected(ref, "blob upload start", start.value))

        location = start.value.headers.get("Location")
        if not location:
            return Err(
                RegistryPushError(
                    reference=ref.display(),
                    message="failed to push image: registry returned no upload location",
                )
            )

        upload_url = urllib.parse.urljoin(self._base(ref), location)
        sep = "&" if "?" in upload_url else "?"
        upload_url = f"{upload_url}{sep}digest={urllib.parse.quote(blob.digest, safe='')}"

        self._trace(f"upload {blob.digest[:19]} ({blob.size} bytes)")
        put = self._request(
            "PUT",
            upload_url,
            ref=ref,
            headers={"Content-Type": "application/octet-stream"},
            body=blob,
        )
        if isinstance(put, Err):
            return put
        if put.value.status not in (201, 204):
            return Err(self._unexpected(ref, "blob upload", put.value))
        return Ok(None)

    # -- transport -----------------------------------------------------------

    def _base(self, ref: ImageReference) -> str:
        scheme = "http" if self.insecure or ref.is_local() else "https"
        return f"{scheme}://{ref.registry}"

    def _url(self, ref: ImageReference, suffix: str) -> str:
        return f"{self._base(ref)}/v2/{ref.repository}/{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        ref: ImageReference,
        headers: dict[str, str] | None = None,
        body: bytes | Blob | None = None,
    ) -> Result[_Response, RegistryPushError]:
        """Send a request, answering at most one auth challenge."""
        self._trace(f"{method} {url}")
        result = self._send(method, url, ref=ref, headers=headers, body=body)
        if isinstance(result, Err) or result.value.status != 401:
            return result

        challenge = result.value.headers.get("WWW-Authenticate", "")
        auth = self._authenticate(ref, challenge)
        if isinstance(auth, Err):
            return auth
        self._auth[(ref.registry, ref.repository)] = auth.value

        result = self._send(method, url, ref=ref, headers=headers, body=body)
        if isinstance(result, Ok) and result.value.status == 401:
            return Err(
                RegistryPushError(
                    reference=ref.display(),
                    message="failed to push image: unauthorized",
                    hint=result.value.body.decode("utf-8", "replace").strip() or None,
                )
            )
        return result

    def _send(
        self,
        method: str,
        url: str,
        *,
        ref: ImageReference,
        headers: dict[str, str] | None,
        body: bytes | Blob | None,
    ) -> Result[_Response, RegistryPushError]:
        all_headers = {"User-Agent": self.user_agent, **(headers or {})}
        auth = self._auth.get((ref.registry, ref.repository))
        if auth:
            all_headers["Authorization"] = auth

        data: object = None
        if isinstance(body, Blob):
            data = _BlobStream(body)
            all_headers["Content-Length"] = str(body.size)
        elif body is not None:
            data = body
            all_headers["Content-Length"] = str(len(body))

        req = urllib.request.Request(url, data=data, headers=all_headers, method=method)  # type: ignore[arg-type]
        return self._open(req, ref=ref)

    def _open(
        self, req: urllib.request.Request, *, ref: ImageReference
    ) -> Result[_Response, RegistryPushError]:
        context = self._ssl_context if req.full_url.startswith("https:") else None
        try:
            with urllib.request.urlopen(req, timeout=self.timeout, context=context) as response:
                return Ok(_Response(response.status, response.headers, response.read()))
        except urllib.error.HTTPError as e:
            # 4xx/5xx responses are returned as values.
            return Ok(_Response(e.code, e.headers, e.read() if e.fp is not None else b""))
        except urllib.error.URLError as e:
            return Err(self._transport_error(ref, str(e.reason)))
        except TimeoutError:
            return Err(self._transport_error(ref, "request timed out"))
        except (ValueError, OSError) as e:
            return Err(self._transport_error(ref, str(e)))

    # -- auth ----------------------------------------------------------------

    def _basic(self) -> str | None:
        if not self._username:
            return None
        raw = f"{self._username}:{self._password or ''}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")

    def _authenticate(self, ref: ImageReference, challenge: str) -> Result[str, RegistryPushError]:
        scheme, params = _parse_challenge(challenge)

        if scheme == "basic":
            basic = self._basic()
            if basic is None:
                return Err(
                    RegistryPushError(
                        reference=ref.display(),
                        message="failed to push image: registry requires credentials",
                        hint="Set RELEASE_TOOL_REGISTRY_USERNAME / RELEASE_TOOL_REGISTRY_PASSWORD.",
                    )
                )
            return Ok(basic)

        if scheme != "bearer" or "realm" not in params:
            return Err(
                RegistryPushError(
                    reference=ref.display(),
                    message="failed to push image: unsupported auth challenge",
                    hint=challenge or None,
                )
            )

        query = {"scope": params.get("scope") or f"repository:{ref.repository}:pull,push"}
        if "service" in params:
            query["service"] = params["service"]
        token_url = f"{params['realm']}?{urllib.parse.urlencode(query)}"

        headers = {"User-Agent": self.user_agent}
        basic = self._basic()
        if basic:
            headers["Authorization"] = basic
        self._trace(f"GET {token_url}")
        result = self._open(urllib.request.Request(token_url, headers=headers), ref=ref)
        if isinstance(result, Err):
            return result
        if result.value.status != 200:
            return Err(self._unexpected(ref, "token request", result.value))

        try:
            data = as_str_dict(json.loads(result.value.body.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(self._transport_error(ref, f"invalid token response: {e}"))
        token = (get_str(data, "token") or get_str(data, "access_token")) if data else None
        if token is None:
            return Err(self._transport_error(ref, "token response has no token"))
        return Ok(f"Bearer {token}")

    # -- errors --------------------------------------------------------------

    def _transport_error(self, ref: ImageReference, detail: str) -> RegistryPushError:
        return RegistryPushError(
            reference=ref.display(), message="failed to push image", hint=detail
        )

    def _unexpected(self, ref: ImageReference, step: str, response: _Response) -> RegistryPushError:
        body = response.body.decode("utf-8", "replace").strip()
        return RegistryPushError(
            reference=ref.display(),
            message=f"failed to push image: {step} returned HTTP {response.status}",
            hint=body or None,
        )

    def _trace(self, message: str) -> None:
        if self._console is not None:
            self._console.print(message, Style.DIM)


def _empty_pushes() -> list[tuple[ImageReference, Image]]:
    return []


@dataclass
class MockRegistryClient:
    """In-memory registry client for testing.

    Usage:
        registry = MockRegistryClient(fail_tags={"0.2.0"})
        registry.push(image, ref.with_tag("0.2.0"))  # -> Err(RegistryPushError)
    """

    fail_tags: set[str] = field(default_factory=set)
    pushes: list[tuple[ImageReference, Image]] = field(default_factory=_empty_pushes)

    def push(self, image: Image, ref: ImageReference) -> Result[str, RegistryPushError]:
        if ref.tag in self.fail_tags:
            return Err(
                RegistryPushError(
                    reference=ref.display(),
                    message="failed to push image",
                    hint="push rejected (mock)",
                )
            )
        self.pushes.append((ref, image))
        return Ok(image.manifest_digest)

    @property
    def tags(self) -> list[str]:
        return [ref.tag for ref, _ in self.pushes]
