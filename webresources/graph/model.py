"""Directed dependency graph with a post-order topological sort."""

from __future__ import annotations

from enum import Enum, auto
from typing import Dict, Iterator, List, Tuple

from ..errors import CircularReferenceError


class _VisitState(Enum):
    UNVISITED = auto()
    IN_PROGRESS = auto()
    RESOLVED = auto()


class Node:
    """A named vertex; ``add_edge`` records "this node depends on other".

    Nodes compare and hash by name only. Edges keep insertion order so the
    resolved sequence is reproducible for a given construction order.
    """

    __slots__ = ("_name", "_graph", "_edges")

    def __init__(self, name: str, graph: "Graph") -> None:
        self._name = name
        self._graph = graph
        self._edges: Dict[str, Node] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def edges(self) -> Tuple["Node", ...]:
        return tuple(self._edges.values())

    def add_edge(self, other: "Node") -> None:
        if other._graph is not self._graph:
            raise ValueError(
                f"Node '{other.name}' belongs to a different graph"
            )
        self._edges.setdefault(other.name, other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._name == other._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __repr__(self) -> str:
        return f"Node(name={self._name!r})"


class Graph:
    """Owns a set of uniquely named nodes for one reordering pass."""

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    def create_node(self, name: str) -> Node:
        """Return the node registered under ``name``, creating it if needed."""
        node = self._nodes.get(name)
        if node is None:
            node = Node(name, self)
            self._nodes[name] = node
        return node

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def resolve_dependencies(self) -> List[Node]:
        """Return every node after all of the nodes it depends on.

        Depth-first, post-order. Raises :class:`CircularReferenceError` as
        soon as an edge leads back to a node on the current path.
        """
        state: Dict[str, _VisitState] = {
            name: _VisitState.UNVISITED for name in self._nodes
        }
        resolved: List[Node] = []

        for root in self._nodes.values():
            if state[root.name] is not _VisitState.UNVISITED:
                continue
            state[root.name] = _VisitState.IN_PROGRESS
            # Each frame holds a node and an iterator over its pending edges.
            stack: List[Tuple[Node, Iterator[Node]]] = [
                (root, iter(root.edges))
            ]
            while stack:
                node, pending = stack[-1]
                for edge in pending:
                    edge_state = state[edge.name]
                    if edge_state is _VisitState.RESOLVED:
                        continue
                    if edge_state is _VisitState.IN_PROGRESS:
                        raise CircularReferenceError(node, edge)
                    state[edge.name] = _VisitState.IN_PROGRESS
                    stack.append((edge, iter(edge.edges)))
                    break
                else:
                    stack.pop()
                    state[node.name] = _VisitState.RESOLVED
                    resolved.append(node)

        return resolved
