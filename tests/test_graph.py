from __future__ import annotations

from typing import Dict

import pytest

from webresources.errors import CircularReferenceError
from webresources.graph import Graph


def _positions(graph: Graph) -> Dict[str, int]:
    resolved = graph.resolve_dependencies()
    return {node.name: index for index, node in enumerate(resolved)}


def test_create_node_is_idempotent() -> None:
    graph = Graph()

    first = graph.create_node("a.js")
    second = graph.create_node("a.js")

    assert first is second
    assert len(graph) == 1
    assert "a.js" in graph


def test_add_edge_deduplicates() -> None:
    graph = Graph()
    a = graph.create_node("a")
    b = graph.create_node("b")

    a.add_edge(b)
    a.add_edge(graph.create_node("b"))

    assert a.edges == (b,)


def test_nodes_compare_by_name() -> None:
    assert Graph().create_node("x") == Graph().create_node("x")
    assert hash(Graph().create_node("x")) == hash("x")


def test_add_edge_rejects_foreign_node() -> None:
    graph = Graph()
    other = Graph()

    with pytest.raises(ValueError):
        graph.create_node("a").add_edge(other.create_node("b"))


def test_chain_resolves_dependencies_first() -> None:
    graph = Graph()
    a, b, c = (graph.create_node(name) for name in ("a", "b", "c"))
    a.add_edge(b)
    b.add_edge(c)

    assert [node.name for node in graph.resolve_dependencies()] == [
        "c",
        "b",
        "a",
    ]


def test_every_edge_target_precedes_its_source() -> None:
    graph = Graph()
    edges = [
        ("app", "view"),
        ("app", "store"),
        ("view", "model"),
        ("store", "model"),
        ("view", "util"),
        ("report", "util"),
    ]
    for name in ("lonely", "app", "report", "view", "store", "model", "util"):
        graph.create_node(name)
    for source, target in edges:
        graph.create_node(source).add_edge(graph.create_node(target))

    positions = _positions(graph)

    assert set(positions) == {
        "lonely", "app", "report", "view", "store", "model", "util"
    }
    for source, target in edges:
        assert positions[target] < positions[source]


def test_resolved_nodes_are_not_revisited() -> None:
    graph = Graph()
    shared = graph.create_node("shared")
    for name in ("a", "b", "c"):
        graph.create_node(name).add_edge(shared)

    resolved = graph.resolve_dependencies()

    assert [node.name for node in resolved].count("shared") == 1
    assert len(resolved) == 4


def test_cycle_raises_with_closing_edge() -> None:
    graph = Graph()
    a, b, c = (graph.create_node(name) for name in ("a", "b", "c"))
    a.add_edge(b)
    b.add_edge(c)
    c.add_edge(a)

    with pytest.raises(CircularReferenceError) as excinfo:
        graph.resolve_dependencies()

    assert excinfo.value.node.name == "c"
    assert excinfo.value.edge.name == "a"
    assert str(excinfo.value) == "Circular reference detected: c -> a"


def test_self_reference_is_a_cycle() -> None:
    graph = Graph()
    node = graph.create_node("self")
    node.add_edge(node)

    with pytest.raises(CircularReferenceError):
        graph.resolve_dependencies()


def test_cycle_detected_even_behind_acyclic_nodes() -> None:
    graph = Graph()
    for index in range(50):
        graph.create_node(f"free{index}")
    x = graph.create_node("x")
    y = graph.create_node("y")
    x.add_edge(y)
    y.add_edge(x)

    with pytest.raises(CircularReferenceError):
        graph.resolve_dependencies()


def test_deep_chain_does_not_exhaust_the_stack() -> None:
    graph = Graph()
    previous = graph.create_node("n0")
    for index in range(1, 5000):
        current = graph.create_node(f"n{index}")
        previous.add_edge(current)
        previous = current

    resolved = graph.resolve_dependencies()

    assert resolved[0].name == "n4999"
    assert resolved[-1].name == "n0"
