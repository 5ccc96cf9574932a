"""Pure state transitions for the condition graph.

Every function takes a Graph and returns the next Graph. Nothing here performs
I/O or reads the clock; fresh ids come from the ``new_id`` callable supplied by
the caller, which is asked for ``"node"`` or ``"edge"`` ids.

All transitions are total over a valid graph and keep its invariants:
- deleting a node (directly or through a canvas ``remove`` change) also
  deletes every edge that references it;
- edges are only created between nodes that exist;
- ids already in the graph are never reassigned.

A transition that changes nothing returns the very same Graph object, so
callers can detect no-ops with ``is``.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Callable, Iterable, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .catalog import DEFAULT_FIELD, DEFAULT_OPERATOR
from .changes import (
    EdgeAddChange,
    EdgeRemoveChange,
    NodePositionChange,
    NodeRemoveChange,
    parse_edge_changes,
    parse_node_changes,
)
from .layout import DEFAULT_LAYOUT, Layout
from .model import ConditionNode, ConnectionEdge, Graph, coerce_value

IdFactory = Callable[[str], str]

NODE = "node"
EDGE = "edge"

UPDATABLE_FIELDS = ("field", "operator", "value")

# Keys that must stay non-blank for the condition to survive a reload.
REQUIRED_FIELDS = ("field", "operator")

# Upper bound on retries when an id factory returns ids already in use.
MAX_ID_ATTEMPTS = 64


class IdCollisionError(RuntimeError):
    """Raised when an id factory keeps returning ids that are already taken."""

    def __init__(self, kind: str, attempts: int):
        self.kind = kind
        self.attempts = attempts
        super().__init__(f"Id factory returned taken {kind} ids {attempts} times in a row")


def fresh_id(new_id: IdFactory, kind: str, taken: set[str]) -> str:
    """Ask ``new_id`` for an id of ``kind`` not present in ``taken``."""
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = new_id(kind)
        if candidate.strip() and candidate not in taken:
            return candidate
    raise IdCollisionError(kind, MAX_ID_ATTEMPTS)


def _replace(graph: Graph, nodes=None, edges=None) -> Graph:
    return Graph(
        nodes=graph.nodes if nodes is None else tuple(nodes),
        edges=graph.edges if edges is None else tuple(edges),
    )


def add_node(
    graph: Graph,
    new_id: IdFactory,
    *,
    field: str = DEFAULT_FIELD,
    operator: str = DEFAULT_OPERATOR,
    value: str = "",
    layout: Layout = DEFAULT_LAYOUT,
) -> Graph:
    """Append a condition placed below all existing nodes.

    A blank field or operator falls back to the default one.
    """
    node = ConditionNode(
        id=fresh_id(new_id, NODE, graph.get_node_ids()),
        field=field if field.strip() else DEFAULT_FIELD,
        operator=operator if operator.strip() else DEFAULT_OPERATOR,
        value=value,
        position=layout.slot(len(graph.nodes)),
    )
    return _replace(graph, nodes=graph.nodes + (node,))


def delete_node(graph: Graph, node_id: str) -> Graph:
    """Remove a node and every edge that references it. Unknown ids are a no-op."""
    if not graph.has_node(node_id):
        return graph
    return _replace(
        graph,
        nodes=[n for n in graph.nodes if n.id != node_id],
        edges=[e for e in graph.edges if e.source != node_id and e.target != node_id],
    )


def update_node_data(graph: Graph, node_id: str, updates: Mapping[str, Any]) -> Graph:
    """Replace field/operator/value on one node.

    Keys other than field, operator and value are ignored, as are blank
    field or operator values. Unknown ids are a no-op.
    """
    node = graph.get_node_by_id(node_id)
    if node is None:
        return graph

    patch = {}
    for key in UPDATABLE_FIELDS:
        if key in updates:
            new_value = coerce_value(updates[key])
            if key in REQUIRED_FIELDS and not new_value.strip():
                continue
            if getattr(node, key) != new_value:
                patch[key] = new_value
    if not patch:
        return graph

    updated = node.model_copy(update=patch)
    return _replace(graph, nodes=[updated if n.id == node_id else n for n in graph.nodes])


def move_node(graph: Graph, node_id: str, x: float, y: float) -> Graph:
    """Place a node at (x, y). Non-finite coordinates are a no-op."""
    if not (math.isfinite(x) and math.isfinite(y)):
        return graph
    node = graph.get_node_by_id(node_id)
    if node is None or (node.position.x == x and node.position.y == y):
        return graph
    updated = node.model_copy(update={"position": node.position.model_copy(update={"x": x, "y": y})})
    return _replace(graph, nodes=[updated if n.id == node_id else n for n in graph.nodes])


def apply_node_changes(graph: Graph, changes: Iterable[Any]) -> Graph:
    """Apply a batch of canvas node changes in order.

    ``position`` changes move nodes, ``remove`` changes delete nodes with the
    same edge cascade as delete_node. Selection is presentation state and
    leaves the graph untouched.
    """
    for change in parse_node_changes(changes):
        if isinstance(change, NodePositionChange):
            if change.position is not None:
                graph = move_node(graph, change.id, change.position.x, change.position.y)
        elif isinstance(change, NodeRemoveChange):
            graph = delete_node(graph, change.id)
    return graph


def connect(graph: Graph, source: str, target: str, new_id: IdFactory) -> Graph:
    """Append an edge between two existing nodes.

    Parallel edges and self-loops are allowed. Missing endpoints make this a no-op.
    """
    if not (graph.has_node(source) and graph.has_node(target)):
        return graph
    edge = ConnectionEdge(
        id=fresh_id(new_id, EDGE, graph.get_edge_ids()),
        source=source,
        target=target,
    )
    return _replace(graph, edges=graph.edges + (edge,))


def disconnect(graph: Graph, edge_id: str) -> Graph:
    """Remove one edge. Unknown ids are a no-op."""
    if not graph.has_edge(edge_id):
        return graph
    return _replace(graph, edges=[e for e in graph.edges if e.id != edge_id])


def apply_edge_changes(graph: Graph, changes: Iterable[Any], new_id: IdFactory) -> Graph:
    """Apply a batch of canvas edge changes in order.

    An ``add`` naming a missing node, or carrying an id already in use, is
    skipped. Removing an edge never affects nodes.
    """
    for change in parse_edge_changes(changes):
        if isinstance(change, EdgeAddChange):
            item = change.item
            if not (graph.has_node(item.source) and graph.has_node(item.target)):
                continue
            if item.id is None:
                graph = connect(graph, item.source, item.target, new_id)
            elif not graph.has_edge(item.id):
                edge = ConnectionEdge(id=item.id, source=item.source, target=item.target)
                graph = _replace(graph, edges=graph.edges + (edge,))
        elif isinstance(change, EdgeRemoveChange):
            graph = disconnect(graph, change.id)
    return graph


# Actions

class AddNode(BaseModel):
    kind: Literal["add_node"] = "add_node"
    field: str = DEFAULT_FIELD
    operator: str = DEFAULT_OPERATOR
    value: str = ""

    model_config = ConfigDict(extra="forbid", frozen=True)


class DeleteNode(BaseModel):
    kind: Literal["delete_node"] = "delete_node"
    id: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class UpdateNodeData(BaseModel):
    kind: Literal["update_node_data"] = "update_node_data"
    id: str
    updates: dict[str, Any]

    model_config = ConfigDict(extra="forbid", frozen=True)


class ApplyNodeChanges(BaseModel):
    kind: Literal["apply_node_changes"] = "apply_node_changes"
    changes: list[Any]

    model_config = ConfigDict(extra="forbid", frozen=True)


class Connect(BaseModel):
    kind: Literal["connect"] = "connect"
    source: str
    target: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class Disconnect(BaseModel):
    kind: Literal["disconnect"] = "disconnect"
    id: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class ApplyEdgeChanges(BaseModel):
    kind: Literal["apply_edge_changes"] = "apply_edge_changes"
    changes: list[Any]

    model_config = ConfigDict(extra="forbid", frozen=True)


Action = Annotated[
    Union[AddNode, DeleteNode, UpdateNodeData, ApplyNodeChanges, Connect, Disconnect, ApplyEdgeChanges],
    Field(discriminator="kind"),
]


def reduce(
    graph: Graph,
    action: Action,
    new_id: IdFactory,
    layout: Optional[Layout] = None,
) -> Graph:
    """Apply a single action to ``graph`` and return the next graph."""
    if layout is None:
        layout = DEFAULT_LAYOUT
    if isinstance(action, AddNode):
        return add_node(
            graph, new_id,
            field=action.field, operator=action.operator, value=action.value, layout=layout,
        )
    if isinstance(action, DeleteNode):
        return delete_node(graph, action.id)
    if isinstance(action, UpdateNodeData):
        return update_node_data(graph, action.id, action.updates)
    if isinstance(action, ApplyNodeChanges):
        return apply_node_changes(graph, action.changes)
    if isinstance(action, Connect):
        return connect(graph, action.source, action.target, new_id)
    if isinstance(action, Disconnect):
        return disconnect(graph, action.id)
    if isinstance(action, ApplyEdgeChanges):
        return apply_edge_changes(graph, action.changes, new_id)
    raise TypeError(f"Unsupported action: {type(action).__name__}")


def reduce_all(
    graph: Graph,
    actions: Iterable[Action],
    new_id: IdFactory,
    layout: Optional[Layout] = None,
) -> Graph:
    """Apply actions strictly in the order given."""
    for action in actions:
        graph = reduce(graph, action, new_id, layout)
    return graph
