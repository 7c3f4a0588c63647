"""Serve published bundles from Flask with long-lived cache headers."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Set, Union

from flask import Flask, Response, abort, request, send_from_directory
from werkzeug.http import http_date

from ..errors import ResourceNotFound
from ..storage.content import LocalContentProvider
from ..storage.publisher import InMemoryArtifactRegistry, PublishedArtifact

ENDPOINT_PREFIX = "webresources_artifact"
SOURCE_ENDPOINT_PREFIX = "webresources_source"


def cacheable_response(
    artifact: PublishedArtifact, if_none_match: Optional[str]
) -> Response:
    """Return 304 for a matching ``If-None-Match``, else the full content."""
    if if_none_match == artifact.quoted_etag:
        return Response(status=304)

    response = Response(
        artifact.content,
        status=200,
        content_type=artifact.content_type,
    )
    response.headers["Content-Length"] = str(len(artifact.content))
    response.headers["ETag"] = artifact.quoted_etag
    response.headers["Cache-Control"] = (
        f"public, max-age={artifact.cache_seconds}"
    )
    response.headers["Expires"] = http_date(
        time.time() + artifact.cache_seconds
    )
    return response


class FlaskRoutePublisher:
    """Publisher registering one URL rule per artifact on a Flask app."""

    def __init__(
        self,
        app: Flask,
        *,
        registry: Optional[InMemoryArtifactRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._app = app
        self._registry = registry or InMemoryArtifactRegistry()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def registry(self) -> InMemoryArtifactRegistry:
        return self._registry

    def publish(
        self,
        path: str,
        content: bytes,
        *,
        etag: str,
        cache_seconds: int,
        content_type: str,
    ) -> None:
        if self._registry.get(path) is not None:
            return
        self._registry.publish(
            path,
            content,
            etag=etag,
            cache_seconds=cache_seconds,
            content_type=content_type,
        )
        self._app.add_url_rule(
            path,
            endpoint=f"{ENDPOINT_PREFIX}:{path}",
            view_func=self._serve,
            methods=["GET"],
        )
        self._logger.debug("Registered route %s", path)

    def _serve(self) -> Response:
        artifact = self._registry.get(request.path)
        if artifact is None:
            abort(404)
        return cacheable_response(
            artifact, request.headers.get("If-None-Match")
        )

    def paths(self) -> List[str]:
        return self._registry.paths()


class SourceFileRoutes:
    """Serve individual source files from the content root.

    Only registered paths get a URL rule, so configuration files and
    anything else kept below the root stay unreachable.
    """

    def __init__(
        self,
        app: Flask,
        root: Union[str, Path],
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._app = app
        self._provider = LocalContentProvider(root)
        self._root = self._provider.base_dir
        self._logger = logger or logging.getLogger(__name__)
        self._paths: Set[str] = set()

    def register(self, path: str) -> bool:
        """Add a route for ``path`` when it names a file below the root."""
        if not path.startswith("/") or path.startswith("//"):
            return False
        if path in self._paths:
            return True
        try:
            local_path = self._provider.local_path(path)
        except ResourceNotFound:
            return False
        if not local_path.is_file():
            self._logger.warning("Source file %s does not exist", path)
            return False
        self._paths.add(path)
        self._app.add_url_rule(
            path,
            endpoint=f"{SOURCE_ENDPOINT_PREFIX}:{path}",
            view_func=self._serve,
            methods=["GET"],
        )
        return True

    def _serve(self) -> Response:
        if request.path not in self._paths:
            abort(404)
        return send_from_directory(self._root, request.path.lstrip("/"))

    def paths(self) -> List[str]:
        return sorted(self._paths)
