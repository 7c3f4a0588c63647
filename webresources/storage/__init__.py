"""Content providers and artifact publishers."""

from .content import (ContentProvider, HttpContentProvider,
                      InMemoryContentProvider, LocalContentProvider,
                      normalize_logical_path)
from .publisher import (InMemoryArtifactRegistry, LocalDirectoryPublisher,
                        PublishedArtifact, Publisher, S3ArtifactPublisher)

__all__ = [
    "ContentProvider",
    "HttpContentProvider",
    "InMemoryContentProvider",
    "LocalContentProvider",
    "normalize_logical_path",
    "InMemoryArtifactRegistry",
    "LocalDirectoryPublisher",
    "PublishedArtifact",
    "Publisher",
    "S3ArtifactPublisher",
]
