"""Public API for the triggergraph package.

Stateless functions over stored trigger snapshots. Interactive editing goes
through triggergraph.session.EditingSession instead.
"""

from typing import Any, List, Optional

from triggergraph.codes import IssueCode
from triggergraph.contracts import Issue, ValidationResult
from triggergraph.ids import make_id_factory
from triggergraph.kernel.catalog import (
    is_operator_allowed,
    lookup_field,
    lookup_operator,
    requires_value,
)
from triggergraph.kernel.emission import SerializedGraph, serialize_graph
from triggergraph.kernel.hydration import HydrationResult, parse_snapshot, snapshot_fingerprint
from triggergraph.kernel.model import Graph
from triggergraph.kernel.reconciler import IdFactory
from triggergraph.settings import DEFAULT_SETTINGS, EditorSettings


def _id_factory(settings: EditorSettings, id_factory: Optional[IdFactory]) -> IdFactory:
    return id_factory or make_id_factory(settings.node_id_prefix, settings.edge_id_prefix)


def hydrate(
    conditions: Any,
    edges: Any = None,
    *,
    settings: Optional[EditorSettings] = None,
    id_factory: Optional[IdFactory] = None,
) -> HydrationResult:
    """Build a Graph from a stored (conditions, edges) pair.

    Never raises on malformed records; see the returned report for what was
    repaired or dropped.
    """
    settings = settings or DEFAULT_SETTINGS
    return parse_snapshot(
        conditions, edges,
        new_id=_id_factory(settings, id_factory),
        layout=settings.layout,
    )


def serialize(graph: Graph) -> SerializedGraph:
    """Flatten a Graph to the stored (conditions, edges) shape."""
    return serialize_graph(graph)


def fingerprint(conditions: Any, edges: Any = None) -> str:
    """Content fingerprint of a stored snapshot ("sha256:<hex>")."""
    return snapshot_fingerprint(conditions, edges)


def _catalog_warnings(graph: Graph) -> List[Issue]:
    warnings: List[Issue] = []
    for node in graph.nodes:
        if lookup_field(node.field) is None:
            warnings.append(Issue(
                code=IssueCode.UNKNOWN_FIELD,
                message=f"Condition {node.id} uses field '{node.field}' outside the catalog",
                collection="conditions",
                element_id=node.id,
            ))
        if lookup_operator(node.operator) is None:
            warnings.append(Issue(
                code=IssueCode.UNKNOWN_OPERATOR,
                message=f"Condition {node.id} uses unknown operator '{node.operator}'",
                collection="conditions",
                element_id=node.id,
            ))
            continue
        if not is_operator_allowed(node.field, node.operator):
            warnings.append(Issue(
                code=IssueCode.OPERATOR_NOT_ALLOWED,
                message=f"Operator '{node.operator}' is not allowed for field '{node.field}'",
                collection="conditions",
                element_id=node.id,
            ))
        if requires_value(node.operator) and not node.value.strip():
            warnings.append(Issue(
                code=IssueCode.EMPTY_VALUE,
                message=f"Condition {node.id} has no value for operator '{node.operator}'",
                collection="conditions",
                element_id=node.id,
            ))
    return warnings


def validate(
    conditions: Any,
    edges: Any = None,
    *,
    settings: Optional[EditorSettings] = None,
) -> ValidationResult:
    """Preflight a stored snapshot without touching any session.

    Errors are records hydration would drop. Warnings are repairs hydration
    would make (missing ids or positions) and catalog mismatches, which the
    editor carries verbatim.

    Returns:
        ValidationResult with ok=False if any record would be dropped
    """
    result = hydrate(conditions, edges, settings=settings)
    errors = list(result.report.dropped)
    warnings = list(result.report.repaired) + _catalog_warnings(result.graph)
    return ValidationResult(ok=not errors, errors=errors, warnings=warnings)
