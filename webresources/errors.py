"""Error taxonomy shared by the web resource pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .graph import Node


class WebResourceError(RuntimeError):
    """Base class for web resource processing failures."""


class ConfigReadError(WebResourceError):
    """Raised when the resource configuration file cannot be read."""


class ResourceReadError(WebResourceError):
    """Raised when a single source file cannot be read or decoded."""


class ResourceNotFound(ResourceReadError):
    """Raised when a content provider has no entry for a logical path."""


class CircularReferenceError(WebResourceError):
    """Raised when dependency resolution reaches a node still in progress."""

    def __init__(self, node: "Node", edge: "Node") -> None:
        super().__init__(
            f"Circular reference detected: {node.name} -> {edge.name}"
        )
        self.node = node
        self.edge = edge


class CompressionError(WebResourceError):
    """Raised when the minifier rejects a source file.

    ``resources`` is filled in by the list mode of the processor with the
    paths of every group that did bundle.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        group: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.group = group
        self.resources: List[str] = []


class DigestUnavailable(WebResourceError):
    """Raised when the content hash algorithm is missing from the runtime."""


class PublishError(WebResourceError):
    """Raised when a publisher backend fails to store an artifact."""
