"""Condition graph models."""

from __future__ import annotations

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class GraphIntegrityError(ValueError):
    """Raised when a graph violates id uniqueness or referential integrity."""


class Position(BaseModel):
    x: float
    y: float

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)


class ConditionNode(BaseModel):
    """A single filter rule placed on the canvas."""
    id: str  # Assigned once, never reassigned
    field: str
    operator: str
    value: str = ""
    position: Position

    model_config = ConfigDict(extra="forbid", frozen=True)


class ConnectionEdge(BaseModel):
    """Link between two conditions, read as logical AND."""
    id: str
    source: str
    target: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class Graph(BaseModel):
    """Immutable condition graph. Node and edge order carry no meaning."""
    nodes: Tuple[ConditionNode, ...] = Field(default_factory=tuple)
    edges: Tuple[ConnectionEdge, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(extra="forbid", frozen=True)

    def get_node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_edge_ids(self) -> set[str]:
        return {e.id for e in self.edges}

    def has_node(self, node_id: str) -> bool:
        return any(n.id == node_id for n in self.nodes)

    def has_edge(self, edge_id: str) -> bool:
        return any(e.id == edge_id for e in self.edges)

    def get_node_by_id(self, node_id: str) -> Optional[ConditionNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edge_by_id(self, edge_id: str) -> Optional[ConnectionEdge]:
        for e in self.edges:
            if e.id == edge_id:
                return e
        return None

    def edges_touching(self, node_id: str) -> List[ConnectionEdge]:
        """Edges whose source or target is ``node_id``."""
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

    def integrity_issues(self) -> List[str]:
        """List invariant violations (empty for a valid graph).

        Self-loops and parallel edges are legal and not reported.
        """
        issues: List[str] = []

        seen_nodes: set[str] = set()
        for node in self.nodes:
            if node.id in seen_nodes:
                issues.append(f"duplicate node id: {node.id}")
            seen_nodes.add(node.id)

        seen_edges: set[str] = set()
        for edge in self.edges:
            if edge.id in seen_edges:
                issues.append(f"duplicate edge id: {edge.id}")
            seen_edges.add(edge.id)
            if edge.source not in seen_nodes:
                issues.append(f"edge {edge.id} references missing source: {edge.source}")
            if edge.target not in seen_nodes:
                issues.append(f"edge {edge.id} references missing target: {edge.target}")

        return issues

    def check_integrity(self) -> None:
        """Raise GraphIntegrityError on the first invariant violation."""
        issues = self.integrity_issues()
        if issues:
            raise GraphIntegrityError(issues[0])


EMPTY_GRAPH = Graph()


def coerce_value(value: Any) -> str:
    """Normalize a condition value to its string payload.

    Legacy records may carry list values for list operators; those are joined
    with commas. None becomes the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(coerce_value(v) for v in value)
    return str(value)
