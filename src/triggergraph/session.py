"""Editing session: the surface the presentation layer talks to.

Every mutation is one synchronous step: reduce the current graph with the
action, commit the result, emit it. The emission reads the graph the
transition just produced, never a separately maintained copy, so two actions
in quick succession cannot leak into or undo each other's emissions.
"""

from __future__ import annotations

import logging
from typing import Any, FrozenSet, Iterable, Mapping, Optional

from triggergraph.contracts import HydrationReport
from triggergraph.ids import make_id_factory
from triggergraph.kernel.changes import (
    EdgeSelectChange,
    NodeSelectChange,
    parse_edge_changes,
    parse_node_changes,
)
from triggergraph.kernel.emission import EmissionBridge, EmitCallback, SerializedGraph, serialize_graph
from triggergraph.kernel.hydration import HydrationGuard, HydrationResult
from triggergraph.kernel.model import EMPTY_GRAPH, Graph
from triggergraph.kernel.reconciler import (
    Action,
    AddNode,
    ApplyEdgeChanges,
    ApplyNodeChanges,
    Connect,
    DeleteNode,
    Disconnect,
    IdFactory,
    UpdateNodeData,
    reduce,
)
from triggergraph.settings import DEFAULT_SETTINGS, EditorSettings

logger = logging.getLogger(__name__)


class EditingSession:
    """Interactive editing session over one trigger's condition graph.

    Args:
        on_change: Called as ``on_change(conditions, edges)`` once per graph
            mutation, and once after a hydration that had to generate ids.
        settings: Defaults for new conditions, placement and id prefixes.
        id_factory: ``new_id(kind)`` callable; ``kind`` is "node" or "edge".
    """

    def __init__(
        self,
        on_change: Optional[EmitCallback] = None,
        *,
        settings: Optional[EditorSettings] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self._new_id = id_factory or make_id_factory(
            self.settings.node_id_prefix, self.settings.edge_id_prefix,
        )
        self._guard = HydrationGuard()
        self._bridge = EmissionBridge(on_change, self._guard)
        self._graph: Graph = EMPTY_GRAPH
        self._selected_nodes: set[str] = set()
        self._selected_edges: set[str] = set()
        self._last_report: Optional[HydrationReport] = None

    @classmethod
    def from_snapshot(
        cls,
        conditions: Any,
        edges: Any = None,
        on_change: Optional[EmitCallback] = None,
        **kwargs: Any,
    ) -> "EditingSession":
        """Create a session and hydrate it from a stored trigger."""
        session = cls(on_change, **kwargs)
        session.sync(conditions, edges)
        return session

    # Read access

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def selected_node_ids(self) -> FrozenSet[str]:
        return frozenset(self._selected_nodes)

    @property
    def selected_edge_ids(self) -> FrozenSet[str]:
        return frozenset(self._selected_edges)

    @property
    def last_report(self) -> Optional[HydrationReport]:
        """Report of the most recent hydration, or None before the first one."""
        return self._last_report

    @property
    def emission_count(self) -> int:
        return self._bridge.emission_count

    # Hydration

    def sync(self, conditions: Any, edges: Any = None) -> bool:
        """Offer the owning form's current snapshot.

        Call on every render. Returns True if the session was reseeded from it;
        snapshots the session already reflects are ignored.
        """
        result = self._guard.offer(conditions, edges, new_id=self._new_id, layout=self.settings.layout)
        if result is None:
            return False
        self._reseed(result)
        if result.report.assigned_ids:
            logger.info(
                "Generated %d node id(s) and %d edge id(s) during hydration; persisting them",
                len(result.report.assigned_node_ids), len(result.report.assigned_edge_ids),
            )
            self._bridge.emit(self._graph)
        return True

    def load(self, conditions: Any, edges: Any = None) -> SerializedGraph:
        """Replace the graph with an imported snapshot and emit it."""
        result = self._guard.force(conditions, edges, new_id=self._new_id, layout=self.settings.layout)
        self._reseed(result)
        return self._bridge.emit(self._graph)

    def export(self) -> SerializedGraph:
        """Serialize the current graph without emitting it."""
        return serialize_graph(self._graph)

    def _reseed(self, result: HydrationResult) -> None:
        self._graph = result.graph
        self._selected_nodes.clear()
        self._selected_edges.clear()
        self._last_report = result.report

    # Mutations

    def dispatch(self, action: Action) -> bool:
        """Apply one action and emit the result. Returns False for a no-op."""
        graph = reduce(self._graph, action, self._new_id, self.settings.layout)
        if graph is self._graph:
            return False
        self._graph = graph
        self._selected_nodes &= graph.get_node_ids()
        self._selected_edges &= graph.get_edge_ids()
        self._bridge.emit(graph)
        return True

    def add_condition(self) -> str:
        """Append a default condition below the existing ones; returns its id."""
        self.dispatch(AddNode(field=self.settings.default_field, operator=self.settings.default_operator))
        return self._graph.nodes[-1].id

    def delete_condition(self, node_id: str) -> bool:
        return self.dispatch(DeleteNode(id=node_id))

    def update_condition(self, node_id: str, updates: Optional[Mapping[str, Any]] = None, **fields: Any) -> bool:
        """Change field, operator and/or value of one condition."""
        merged = dict(updates or {})
        merged.update(fields)
        return self.dispatch(UpdateNodeData(id=node_id, updates=merged))

    def connect(self, source: str, target: str) -> Optional[str]:
        """Link two conditions; returns the new edge id, or None if an endpoint is missing."""
        if self.dispatch(Connect(source=source, target=target)):
            return self._graph.edges[-1].id
        return None

    def disconnect(self, edge_id: str) -> bool:
        return self.dispatch(Disconnect(id=edge_id))

    def on_nodes_moved(self, changes: Iterable[Any]) -> bool:
        """Apply a batch of canvas node changes (drag, select, remove)."""
        parsed = parse_node_changes(changes)
        for change in parsed:
            if isinstance(change, NodeSelectChange):
                if change.selected:
                    self._selected_nodes.add(change.id)
                else:
                    self._selected_nodes.discard(change.id)
        self._selected_nodes &= self._graph.get_node_ids()
        return self.dispatch(ApplyNodeChanges(changes=parsed))

    def on_edges_changed(self, changes: Iterable[Any]) -> bool:
        """Apply a batch of canvas edge changes (add, select, remove)."""
        parsed = parse_edge_changes(changes)
        for change in parsed:
            if isinstance(change, EdgeSelectChange):
                if change.selected:
                    self._selected_edges.add(change.id)
                else:
                    self._selected_edges.discard(change.id)
        self._selected_edges &= self._graph.get_edge_ids()
        return self.dispatch(ApplyEdgeChanges(changes=parsed))
