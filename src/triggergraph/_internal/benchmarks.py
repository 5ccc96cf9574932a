"""Performance sentinel workloads and budgets."""

from __future__ import annotations

import os
from typing import Callable, List, Tuple

from triggergraph.kernel.hydration import parse_snapshot
from triggergraph.kernel.model import Graph
from triggergraph.session import EditingSession


def _budget_from_env(var_name: str, default_ms: float) -> float:
    raw = os.getenv(var_name)
    if not raw:
        return default_ms
    try:
        return float(raw)
    except ValueError:
        return default_ms


MAX_HYDRATE_MS = _budget_from_env("TRIGGERGRAPH_MAX_HYDRATE_MS", 250.0)
MAX_EDIT_BURST_MS = _budget_from_env("TRIGGERGRAPH_MAX_EDIT_BURST_MS", 500.0)

SENTINEL_CONDITIONS = 500
SENTINEL_EDITS = 200


def _counter_ids() -> Callable[[str], str]:
    counter = {"n": 0}

    def new_id(kind: str) -> str:
        counter["n"] += 1
        return f"{kind}-{counter['n']}"

    return new_id


def legacy_snapshot(count: int = SENTINEL_CONDITIONS) -> Tuple[List[dict], List[dict]]:
    """A legacy trigger: conditions without positions, chained by edges without ids."""
    conditions = [
        {"id": f"c{i}", "field": "status", "operator": "equals", "value": f"v{i}"}
        for i in range(count)
    ]
    edges = [{"source": f"c{i}", "target": f"c{i + 1}"} for i in range(count - 1)]
    return conditions, edges


def run_hydrate(count: int = SENTINEL_CONDITIONS) -> Graph:
    conditions, edges = legacy_snapshot(count)
    return parse_snapshot(conditions, edges, new_id=_counter_ids()).graph


def run_edit_burst(edits: int = SENTINEL_EDITS) -> EditingSession:
    """Add, connect and update conditions in a tight loop, emitting every step."""
    session = EditingSession(lambda conditions, edges: None, id_factory=_counter_ids())
    previous = None
    for i in range(edits):
        node_id = session.add_condition()
        session.update_condition(node_id, value=str(i))
        if previous is not None:
            session.connect(previous, node_id)
        previous = node_id
    return session

