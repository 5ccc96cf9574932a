"""Hydration: building a session graph from an external snapshot.

parse_snapshot() turns the trigger's stored ``conditions``/``edges`` into a
valid Graph. It never raises on bad data: records that cannot be kept are
logged, dropped and listed in the report; missing ids and positions are filled.

HydrationGuard decides, for every snapshot the owning form supplies, whether
it is new content (reseed the session) or content the session already has
(leave in-progress edits alone). Trigger switches are ordinary new content.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Iterator, List, NamedTuple, Optional, Tuple

from pydantic import ValidationError

from triggergraph.codes import IssueCode
from triggergraph.contracts import ConditionRecord, EdgeRecord, HydrationReport, Issue

from .fingerprint import fingerprint_snapshot
from .layout import DEFAULT_LAYOUT, Layout
from .model import ConditionNode, ConnectionEdge, Graph, Position, coerce_value
from .reconciler import EDGE, NODE, IdFactory, fresh_id

logger = logging.getLogger(__name__)


class HydrationResult(NamedTuple):
    graph: Graph
    report: HydrationReport


def as_record_list(items: Any) -> Optional[list]:
    """Materialize a snapshot collection. None means "no records".

    Returns None for values that are not a collection of records at all.
    """
    if items is None:
        return []
    if isinstance(items, (str, bytes, Mapping)):
        return None
    try:
        return list(items)
    except TypeError:
        return None


def _fingerprint(conditions: Any, raw_conditions: Optional[list], edges: Any, raw_edges: Optional[list]) -> str:
    return fingerprint_snapshot(
        raw_conditions if raw_conditions is not None else [repr(conditions)],
        raw_edges if raw_edges is not None else [repr(edges)],
    )


def snapshot_fingerprint(conditions: Any, edges: Any = None) -> str:
    """Fingerprint of an external snapshot, as the guard computes it."""
    return _fingerprint(conditions, as_record_list(conditions), edges, as_record_list(edges))


def _drop(report: HydrationReport, code: IssueCode, message: str, collection: str,
          index: Optional[int] = None, element_id: Optional[str] = None) -> None:
    logger.warning("Dropping %s record during hydration: %s", collection, message)
    report.dropped.append(Issue(
        code=code, message=message, collection=collection, index=index, element_id=element_id,
    ))


def _repair(report: HydrationReport, code: IssueCode, message: str, collection: str,
            index: int, element_id: str) -> None:
    logger.debug("Repaired %s record %d during hydration: %s", collection, index, message)
    report.repaired.append(Issue(
        code=code, message=message, collection=collection, index=index, element_id=element_id,
    ))


def _validate_records(model, raw: list, collection: str, code: IssueCode,
                      report: HydrationReport) -> List[Tuple[int, Any]]:
    records = []
    for index, item in enumerate(raw):
        try:
            records.append((index, model.model_validate(item)))
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<record>'}: {err['msg']}" for err in e.errors()
            )
            _drop(report, code, f"invalid {collection[:-1]} at index {index}: {errors}", collection, index=index)
    return records


def parse_snapshot(
    conditions: Any,
    edges: Any = None,
    *,
    new_id: IdFactory,
    layout: Layout = DEFAULT_LAYOUT,
    fingerprint: Optional[str] = None,
) -> HydrationResult:
    """Build a fresh Graph from an external (conditions, edges) pair.

    - Conditions without an id get a fresh one; later duplicates of an id are dropped.
    - A missing ``x`` becomes ``layout.column_x``; a missing ``y`` becomes the slot
      for the record's index in the input list.
    - Edges without an id get a fresh one; duplicate edge ids and edges naming a
      node that is not in the rebuilt graph are dropped.

    Ids present on the snapshot are kept verbatim and are never handed out as
    fresh ids.
    """
    raw_conditions = as_record_list(conditions)
    raw_edges = as_record_list(edges)
    if fingerprint is None:
        fingerprint = _fingerprint(conditions, raw_conditions, edges, raw_edges)
    report = HydrationReport(fingerprint=fingerprint)

    if raw_conditions is None:
        _drop(report, IssueCode.INVALID_SNAPSHOT,
              f"conditions must be a list, got {type(conditions).__name__}", "snapshot")
        raw_conditions = []
    if raw_edges is None:
        _drop(report, IssueCode.INVALID_SNAPSHOT,
              f"edges must be a list, got {type(edges).__name__}", "snapshot")
        raw_edges = []

    # Nodes
    condition_records = _validate_records(
        ConditionRecord, raw_conditions, "conditions", IssueCode.INVALID_CONDITION, report,
    )
    taken_node_ids = {r.id for _, r in condition_records if r.id is not None}
    seen_node_ids: set[str] = set()
    nodes: List[ConditionNode] = []

    for index, record in condition_records:
        node_id = record.id
        if node_id is None:
            node_id = fresh_id(new_id, NODE, taken_node_ids)
            taken_node_ids.add(node_id)
            report.assigned_node_ids.append(node_id)
            _repair(report, IssueCode.MISSING_NODE_ID, f"assigned id {node_id}", "conditions", index, node_id)
        elif node_id in seen_node_ids:
            _drop(report, IssueCode.DUPLICATE_NODE_ID, f"duplicate condition id: {node_id}",
                  "conditions", index=index, element_id=node_id)
            continue
        seen_node_ids.add(node_id)

        x = layout.slot_x() if record.x is None else record.x
        y = layout.slot_y(index) if record.y is None else record.y
        if record.x is None or record.y is None:
            _repair(report, IssueCode.MISSING_POSITION, f"placed at ({x}, {y})", "conditions", index, node_id)

        nodes.append(ConditionNode(
            id=node_id,
            field=record.field,
            operator=record.operator,
            value=coerce_value(record.value),
            position=Position(x=x, y=y),
        ))

    # Edges
    edge_records = _validate_records(EdgeRecord, raw_edges, "edges", IssueCode.INVALID_EDGE, report)
    taken_edge_ids = {r.id for _, r in edge_records if r.id is not None}
    seen_edge_ids: set[str] = set()
    kept_edges: List[ConnectionEdge] = []

    for index, record in edge_records:
        missing = [end for end in (record.source, record.target) if end not in seen_node_ids]
        if missing:
            _drop(report, IssueCode.DANGLING_EDGE,
                  f"edge {record.source} -> {record.target} references missing node(s): {', '.join(missing)}",
                  "edges", index=index, element_id=record.id)
            continue

        edge_id = record.id
        if edge_id is None:
            edge_id = fresh_id(new_id, EDGE, taken_edge_ids)
            taken_edge_ids.add(edge_id)
            report.assigned_edge_ids.append(edge_id)
            _repair(report, IssueCode.MISSING_EDGE_ID, f"assigned id {edge_id}", "edges", index, edge_id)
        elif edge_id in seen_edge_ids:
            _drop(report, IssueCode.DUPLICATE_EDGE_ID, f"duplicate edge id: {edge_id}",
                  "edges", index=index, element_id=edge_id)
            continue
        seen_edge_ids.add(edge_id)

        kept_edges.append(ConnectionEdge(id=edge_id, source=record.source, target=record.target))

    return HydrationResult(Graph(nodes=tuple(nodes), edges=tuple(kept_edges)), report)


class HydrationGuard:
    """Tracks which external snapshots the session already reflects.

    Two fingerprints count as "already known": the snapshot last hydrated and
    the snapshot last emitted. Offering either again is a no-op, so the owning
    form echoing an emission back, or re-rendering with the record it started
    from, never reseeds the session. While an emission is in flight, offered
    snapshots are ignored outright.
    """

    def __init__(self):
        self._hydrated: Optional[str] = None
        self._emitted: Optional[str] = None
        self._suppress_depth = 0

    @property
    def hydrated_fingerprint(self) -> Optional[str]:
        return self._hydrated

    @property
    def emitted_fingerprint(self) -> Optional[str]:
        return self._emitted

    @property
    def suppressing(self) -> bool:
        return self._suppress_depth > 0

    def is_known(self, fingerprint: str) -> bool:
        return fingerprint == self._hydrated or fingerprint == self._emitted

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Ignore offered snapshots for the duration of the block."""
        self._suppress_depth += 1
        try:
            yield
        finally:
            self._suppress_depth -= 1

    def acknowledge(self, fingerprint: str) -> None:
        """Record the fingerprint of a snapshot the session has emitted."""
        self._emitted = fingerprint

    def mark_hydrated(self, fingerprint: str) -> None:
        self._hydrated = fingerprint
        self._emitted = None

    def offer(
        self,
        conditions: Any,
        edges: Any = None,
        *,
        new_id: IdFactory,
        layout: Layout = DEFAULT_LAYOUT,
    ) -> Optional[HydrationResult]:
        """Hydrate from the snapshot if it is new content, else return None."""
        if self.suppressing:
            logger.debug("Ignoring snapshot offered during emission")
            return None

        raw_conditions = as_record_list(conditions)
        raw_edges = as_record_list(edges)
        fingerprint = _fingerprint(conditions, raw_conditions, edges, raw_edges)
        if self.is_known(fingerprint):
            return None

        logger.debug("Hydrating from snapshot %s", fingerprint)
        return self.force(
            conditions if raw_conditions is None else raw_conditions,
            edges if raw_edges is None else raw_edges,
            new_id=new_id, layout=layout, fingerprint=fingerprint,
        )

    def force(
        self,
        conditions: Any,
        edges: Any = None,
        *,
        new_id: IdFactory,
        layout: Layout = DEFAULT_LAYOUT,
        fingerprint: Optional[str] = None,
    ) -> HydrationResult:
        """Hydrate unconditionally and record the snapshot as hydrated."""
        result = parse_snapshot(conditions, edges, new_id=new_id, layout=layout, fingerprint=fingerprint)
        self.mark_hydrated(result.report.fingerprint)
        return result
