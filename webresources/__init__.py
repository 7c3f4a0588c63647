"""Bundle, minify and publish configured JavaScript and CSS resources."""

from .bundler import (BundledArtifact, BundleReport, Bundler,
                      WebResourceProcessor, compute_digest)
from .config import ProcessorSettings
from .enumerator import ResourceEnumerator
from .errors import (CircularReferenceError, CompressionError,
                     ConfigReadError, DigestUnavailable, PublishError,
                     ResourceNotFound, ResourceReadError, WebResourceError)
from .graph import Graph, Node
from .ordering import ResourceOrderer
from .parser import ConfigParser
from .resources import GroupKind, WebResource
from .scanner import ScanResult, SourceReferenceScanner

__all__ = [
    "BundledArtifact",
    "BundleReport",
    "Bundler",
    "WebResourceProcessor",
    "compute_digest",
    "ProcessorSettings",
    "ResourceEnumerator",
    "CircularReferenceError",
    "CompressionError",
    "ConfigReadError",
    "DigestUnavailable",
    "PublishError",
    "ResourceNotFound",
    "ResourceReadError",
    "WebResourceError",
    "Graph",
    "Node",
    "ResourceOrderer",
    "ConfigParser",
    "GroupKind",
    "WebResource",
    "ScanResult",
    "SourceReferenceScanner",
]
