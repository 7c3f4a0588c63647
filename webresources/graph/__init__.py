"""Dependency graph used to order JavaScript sources."""

from ..errors import CircularReferenceError
from .model import Graph, Node

__all__ = [
    "CircularReferenceError",
    "Graph",
    "Node",
]
