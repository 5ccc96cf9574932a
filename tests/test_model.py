"""Tests for the condition graph models."""

import pytest
from pydantic import ValidationError

from triggergraph.kernel.layout import DEFAULT_LAYOUT, Layout
from triggergraph.kernel.model import (
    ConditionNode,
    ConnectionEdge,
    Graph,
    GraphIntegrityError,
    Position,
    coerce_value,
)


def _node(node_id, y=50):
    return ConditionNode(id=node_id, field="status", operator="equals", value="open", position=Position(x=250, y=y))


def test_graph_accepts_lists_and_stores_tuples():
    graph = Graph(nodes=[_node("a")], edges=[])
    assert isinstance(graph.nodes, tuple)
    assert graph.get_node_ids() == {"a"}


def test_models_are_frozen():
    node = _node("a")
    with pytest.raises(ValidationError):
        node.value = "closed"


def test_extra_fields_forbidden():
    with pytest.raises(ValidationError):
        ConnectionEdge(id="e1", source="a", target="b", label="AND")


def test_lookups():
    graph = Graph(
        nodes=(_node("a"), _node("b", 230)),
        edges=(ConnectionEdge(id="e1", source="a", target="b"),),
    )
    assert graph.get_node_by_id("b").position.y == 230
    assert graph.get_node_by_id("zzz") is None
    assert graph.get_edge_by_id("e1").target == "b"
    assert graph.has_edge("e1")
    assert not graph.has_node("zzz")
    assert [e.id for e in graph.edges_touching("a")] == ["e1"]
    assert graph.edges_touching("zzz") == []


def test_integrity_issues_dangling_and_duplicates():
    graph = Graph(
        nodes=(_node("a"), _node("a")),
        edges=(
            ConnectionEdge(id="e1", source="a", target="ghost"),
            ConnectionEdge(id="e1", source="a", target="a"),
        ),
    )
    issues = graph.integrity_issues()
    assert "duplicate node id: a" in issues
    assert "duplicate edge id: e1" in issues
    assert "edge e1 references missing target: ghost" in issues
    with pytest.raises(GraphIntegrityError):
        graph.check_integrity()


def test_self_loops_and_parallel_edges_are_legal():
    graph = Graph(
        nodes=(_node("a"), _node("b")),
        edges=(
            ConnectionEdge(id="e1", source="a", target="a"),
            ConnectionEdge(id="e2", source="a", target="b"),
            ConnectionEdge(id="e3", source="a", target="b"),
        ),
    )
    assert graph.integrity_issues() == []


def test_overlapping_node_and_edge_ids_are_legal():
    """Node and edge ids live in independent spaces."""
    graph = Graph(nodes=(_node("x"),), edges=(ConnectionEdge(id="x", source="x", target="x"),))
    graph.check_integrity()


def test_coerce_value():
    assert coerce_value(None) == ""
    assert coerce_value("open") == "open"
    assert coerce_value(["vip", "audit"]) == "vip,audit"
    assert coerce_value(1000) == "1000"
    assert coerce_value(True) == "true"


def test_default_layout_slots():
    assert DEFAULT_LAYOUT.slot(0) == Position(x=250, y=50)
    assert DEFAULT_LAYOUT.slot(1) == Position(x=250, y=230)
    assert DEFAULT_LAYOUT.slot(3) == Position(x=250, y=590)


def test_custom_layout():
    layout = Layout(column_x=0, row_spacing=100, row_offset=10)
    assert layout.slot(2) == Position(x=0, y=210)


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_position_rejects_non_finite_coordinates(bad):
    with pytest.raises(ValidationError):
        Position(x=bad, y=0)
    with pytest.raises(ValidationError):
        Position(x=0, y=bad)
