"""Content providers resolving logical resource paths to bytes."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Union

import requests

from ..errors import ResourceNotFound, ResourceReadError


class ContentProvider(Protocol):
    """Interface the pipeline uses to read sources and list directories."""

    def read_bytes(self, path: str) -> bytes:
        """Return raw content or raise a ResourceReadError subclass."""

    def list_directory(self, path: str) -> List[str]:
        """Return immediate children; sub-directories end with ``/``."""


def normalize_logical_path(path: str) -> str:
    """Return ``path`` as an absolute, normalized logical path."""
    trailing = path.endswith("/")
    normalized = posixpath.normpath("/" + path.lstrip("/"))
    if trailing and normalized != "/":
        normalized += "/"
    return normalized


class LocalContentProvider:
    """Serve logical paths from a directory on the local filesystem."""

    def __init__(self, base_dir: Union[str, Path]) -> None:
        self._base_dir = Path(base_dir).resolve()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def local_path(self, path: str) -> Path:
        """Map a logical path below the base directory to a local path."""
        relative = normalize_logical_path(path).lstrip("/")
        candidate = (self._base_dir / relative).resolve()
        try:
            candidate.relative_to(self._base_dir)
        except ValueError as exc:
            raise ResourceNotFound(
                f"Resource '{path}' lies outside {self._base_dir}"
            ) from exc
        return candidate

    def read_bytes(self, path: str) -> bytes:
        local_path = self.local_path(path)
        if not local_path.is_file():
            raise ResourceNotFound(f"Resource '{path}' not found")
        try:
            return local_path.read_bytes()
        except OSError as exc:
            raise ResourceReadError(
                f"Resource '{path}' could not be read: {exc}"
            ) from exc

    def list_directory(self, path: str) -> List[str]:
        try:
            local_dir = self.local_path(path)
        except ResourceNotFound:
            return []
        if not local_dir.is_dir():
            return []

        prefix = normalize_logical_path(path)
        if not prefix.endswith("/"):
            prefix += "/"
        children: List[str] = []
        for child in sorted(local_dir.iterdir(), key=lambda item: item.name):
            if child.is_dir():
                children.append(f"{prefix}{child.name}/")
            else:
                children.append(f"{prefix}{child.name}")
        return children


class InMemoryContentProvider:
    """Dictionary-backed provider for tests and generated sources."""

    def __init__(
        self, files: Optional[Mapping[str, Union[str, bytes]]] = None
    ) -> None:
        self._files: Dict[str, bytes] = {}
        for path, content in (files or {}).items():
            self.add(path, content)

    def add(self, path: str, content: Union[str, bytes]) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._files[normalize_logical_path(path)] = content

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._files[normalize_logical_path(path)]
        except KeyError as exc:
            raise ResourceNotFound(f"Resource '{path}' not found") from exc

    def list_directory(self, path: str) -> List[str]:
        prefix = normalize_logical_path(path)
        if not prefix.endswith("/"):
            prefix += "/"
        children: List[str] = []
        for file_path in self._files:
            if not file_path.startswith(prefix):
                continue
            remainder = file_path[len(prefix):]
            head, sep, _ = remainder.partition("/")
            child = f"{prefix}{head}{sep}"
            if child not in children:
                children.append(child)
        return children


class HttpContentProvider:
    """Fetch sources over HTTP, e.g. from a development asset server.

    HTTP offers no directory listing, so directory declarations expand to
    nothing with this provider.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[Any] = None,
        timeout: float = 10.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    def read_bytes(self, path: str) -> bytes:
        url = f"{self._base_url}{normalize_logical_path(path)}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise ResourceReadError(f"GET {url} failed: {exc}") from exc
        if response.status_code == 404:
            raise ResourceNotFound(f"Resource '{path}' not found at {url}")
        if response.status_code >= 400:
            raise ResourceReadError(
                f"GET {url} returned HTTP {response.status_code}"
            )
        return response.content

    def list_directory(self, path: str) -> List[str]:
        self._logger.warning(
            "Directory listing is not available over HTTP: %s", path
        )
        return []
