"""Emission: reporting the session graph back to the owning form.

serialize_graph() is the inverse of hydration for any graph built by
hydration and reconciler transitions: hydrating its output yields an equal
graph. EmissionBridge delivers that output synchronously and makes sure the
delivery is never mistaken for new external content.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from .hydration import HydrationGuard, snapshot_fingerprint
from .model import ConditionNode, ConnectionEdge, Graph

logger = logging.getLogger(__name__)

EmitCallback = Callable[[List[Dict[str, Any]], List[Dict[str, Any]]], None]


class SerializedGraph(NamedTuple):
    conditions: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


def serialize_condition(node: ConditionNode) -> Dict[str, Any]:
    return {
        "id": node.id,
        "field": node.field,
        "operator": node.operator,
        "value": node.value,
        "x": node.position.x,
        "y": node.position.y,
    }


def serialize_edge(edge: ConnectionEdge) -> Dict[str, Any]:
    return {"id": edge.id, "source": edge.source, "target": edge.target}


def serialize_graph(graph: Graph) -> SerializedGraph:
    """Flatten a graph to the stored ``conditions`` / ``edges`` shape.

    Always returns newly built lists and dicts; callers may mutate them.
    """
    return SerializedGraph(
        conditions=[serialize_condition(n) for n in graph.nodes],
        edges=[serialize_edge(e) for e in graph.edges],
    )


class EmissionBridge:
    """Delivers serialized graphs to the owning form's change callback.

    The fingerprint of every emitted payload is acknowledged with the guard
    before the callback runs, and the callback runs with the guard suppressed,
    so neither a synchronous echo nor a later re-render with the emitted
    payload triggers hydration.
    """

    def __init__(self, callback: Optional[EmitCallback], guard: HydrationGuard):
        self._callback = callback
        self._guard = guard
        self.emission_count = 0

    def emit(self, graph: Graph) -> SerializedGraph:
        payload = serialize_graph(graph)
        self._guard.acknowledge(snapshot_fingerprint(payload.conditions, payload.edges))
        self.emission_count += 1
        logger.debug(
            "Emitting %d condition(s) and %d edge(s)", len(payload.conditions), len(payload.edges),
        )
        if self._callback is not None:
            with self._guard.suppressed():
                self._callback(payload.conditions, payload.edges)
        return payload
