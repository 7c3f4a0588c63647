"""Dependency-aware ordering of JavaScript bundle candidates."""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, List, Optional, Sequence

from .errors import CircularReferenceError, ResourceReadError
from .graph import Graph, Node
from .scanner import ScanResult, SourceReferenceScanner
from .storage.content import ContentProvider


class ResourceOrderer:
    """Reorder JS files so that every file follows the classes it uses.

    Files in ``ignore`` take no part in the graph; they are assumed to be
    dependency free and are moved to the front in their original order.
    A circular reference leaves the input order untouched.
    """

    def __init__(
        self,
        provider: ContentProvider,
        *,
        ignore: AbstractSet[str] = frozenset(),
        scanner: Optional[SourceReferenceScanner] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._provider = provider
        self._ignore = ignore
        self._scanner = scanner or SourceReferenceScanner()
        self._logger = logger or logging.getLogger(__name__)

    def reorder(self, resources: Sequence[str]) -> List[str]:
        if len(resources) <= 1:
            return list(resources)

        graph = Graph()
        class_to_file: Dict[str, str] = {}
        scans: Dict[str, ScanResult] = {}

        for resource in resources:
            if resource in self._ignore:
                continue
            graph.create_node(resource)
            scan = self._scan(resource)
            scans[resource] = scan
            if scan.defined_class:
                class_to_file[scan.defined_class] = resource

        for resource, scan in scans.items():
            node = graph.create_node(resource)
            for reference in sorted(scan.references):
                target = class_to_file.get(reference)
                if target is not None and target != resource:
                    node.add_edge(graph.create_node(target))

        try:
            resolved = graph.resolve_dependencies()
        except CircularReferenceError as exc:
            self._logger.error(
                "Circular reference between %s and %s; keeping configured "
                "order",
                exc.node.name,
                exc.edge.name,
            )
            return list(resources)

        ignored = [
            resource for resource in resources if resource in self._ignore
        ]
        ordered: List[Node] = [graph.create_node(name) for name in ignored]
        ordered.extend(node for node in resolved if node.name not in ignored)

        leaves = [node.name for node in ordered if not node.edges]
        dependents = [node.name for node in ordered if node.edges]
        return leaves + dependents

    def _scan(self, resource: str) -> ScanResult:
        try:
            source = self._provider.read_bytes(resource).decode("utf-8")
        except ResourceReadError as exc:
            self._logger.error("Skipping scan of %s: %s", resource, exc)
            return ScanResult()
        except UnicodeDecodeError as exc:
            self._logger.error("Skipping scan of %s: %s", resource, exc)
            return ScanResult()
        return self._scanner.scan(source)
