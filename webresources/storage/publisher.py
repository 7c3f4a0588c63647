"""
Publishers that expose bundled artifacts to HTTP clients.

Registration is append-only: publishing a path that is already registered
is a no-op, and nothing is ever removed. Stale artifacts simply stop being
referenced by newer tags.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from ..errors import PublishError


@dataclass(frozen=True)
class PublishedArtifact:
    """Content registered under a URL path with its caching metadata."""

    path: str
    content: bytes
    etag: str
    cache_seconds: int
    content_type: str

    @property
    def quoted_etag(self) -> str:
        return f'"{self.etag}"'


class Publisher(Protocol):
    """Interface implemented by artifact publishers."""

    def publish(
        self,
        path: str,
        content: bytes,
        *,
        etag: str,
        cache_seconds: int,
        content_type: str,
    ) -> None:
        """Make ``content`` available under ``path``."""


class InMemoryArtifactRegistry:
    """Thread-safe registry keeping published artifacts in memory."""

    def __init__(self) -> None:
        self._artifacts: Dict[str, PublishedArtifact] = {}
        self._lock = threading.Lock()

    def publish(
        self,
        path: str,
        content: bytes,
        *,
        etag: str,
        cache_seconds: int,
        content_type: str,
    ) -> None:
        with self._lock:
            if path in self._artifacts:
                return
            self._artifacts[path] = PublishedArtifact(
                path=path,
                content=bytes(content),
                etag=etag,
                cache_seconds=cache_seconds,
                content_type=content_type,
            )

    def get(self, path: str) -> Optional[PublishedArtifact]:
        with self._lock:
            return self._artifacts.get(path)

    def paths(self) -> List[str]:
        with self._lock:
            return list(self._artifacts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)


class LocalDirectoryPublisher:
    """Write artifacts below a directory and keep a ``manifest.json``.

    The manifest maps each published path to its etag, content type and
    cache lifetime so a static web server can be configured from it.
    """

    MANIFEST_NAME = "manifest.json"

    def __init__(self, base_dir: Union[str, Path]) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def manifest_path(self) -> Path:
        return self._base_dir / self.MANIFEST_NAME

    def _read_manifest(self) -> Dict[str, Dict[str, Any]]:
        if not self.manifest_path.exists():
            return {}
        try:
            return json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PublishError(
                f"Manifest {self.manifest_path} is unreadable: {exc}"
            ) from exc

    def publish(
        self,
        path: str,
        content: bytes,
        *,
        etag: str,
        cache_seconds: int,
        content_type: str,
    ) -> None:
        destination = self._base_dir / path.lstrip("/")
        with self._lock:
            manifest = self._read_manifest()
            if path in manifest and destination.exists():
                return
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(content)
                manifest[path] = {
                    "file": destination.relative_to(
                        self._base_dir
                    ).as_posix(),
                    "etag": etag,
                    "content_type": content_type,
                    "cache_seconds": cache_seconds,
                }
                self.manifest_path.write_text(
                    json.dumps(manifest, indent=2, sort_keys=True),
                    encoding="utf-8",
                )
            except OSError as exc:
                raise PublishError(
                    f"Failed to write artifact {destination}: {exc}"
                ) from exc


def _looks_like_transient_cloud_failure(exc: Exception) -> bool:
    code = None
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        error = response.get("Error")
        if isinstance(error, dict):
            code = error.get("Code")
    if isinstance(code, str) and code in {
        "SlowDown",
        "Throttling",
        "RequestTimeout",
        "ServiceUnavailable",
        "InternalError",
        "503",
    }:
        return True
    return exc.__class__.__name__ in {
        "EndpointConnectionError",
        "ConnectTimeoutError",
        "ReadTimeoutError",
        "ConnectionClosedError",
    }


class S3ArtifactPublisher:
    """Upload artifacts to an S3 bucket with cache metadata attached."""

    def __init__(
        self,
        bucket: str,
        *,
        object_prefix: str = "",
        client: Any | None = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not bucket:
            raise PublishError("bucket name must be provided")
        self._bucket = bucket
        self._object_prefix = object_prefix.strip("/")
        self._logger = logger or logging.getLogger(__name__)
        if client is None:
            try:
                import boto3 as _boto3
            except ImportError as exc:  # pragma: no cover
                raise PublishError(
                    "boto3 is required for S3 artifact publishing"
                ) from exc
            region = os.environ.get("AWS_REGION") or os.environ.get(
                "AWS_DEFAULT_REGION"
            )
            client_kwargs: Dict[str, Any] = {}
            if region:
                client_kwargs["region_name"] = region
            endpoint_override = os.environ.get("WEBRES_S3_ENDPOINT")
            if endpoint_override:
                client_kwargs["endpoint_url"] = endpoint_override
            client = _boto3.client("s3", **client_kwargs)
        self._s3 = client
        self._published: set[str] = set()
        self._lock = threading.Lock()

    def object_key(self, path: str) -> str:
        prefix = f"{self._object_prefix}/" if self._object_prefix else ""
        return f"{prefix}{path.lstrip('/')}"

    def publish(
        self,
        path: str,
        content: bytes,
        *,
        etag: str,
        cache_seconds: int,
        content_type: str,
    ) -> None:
        key = self.object_key(path)
        with self._lock:
            if key in self._published:
                return
            try:
                self._s3.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=content,
                    ContentType=content_type,
                    CacheControl=f"public, max-age={cache_seconds}",
                    Metadata={"content-digest": etag},
                )
            except Exception as exc:  # noqa: BLE001
                if _looks_like_transient_cloud_failure(exc):
                    raise PublishError(
                        f"S3 temporarily unavailable: {exc}"
                    ) from exc
                raise PublishError(f"S3 upload failed: {exc}") from exc
            self._published.add(key)
        self._logger.info("Uploaded s3://%s/%s", self._bucket, key)
