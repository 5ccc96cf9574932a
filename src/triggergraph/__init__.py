"""triggergraph: condition-graph editing core for workflow automation triggers."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("triggergraph")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from triggergraph.api import hydrate, serialize, fingerprint, validate
from triggergraph.codes import IssueCode
from triggergraph.contracts import (
    ConditionRecord,
    EdgeRecord,
    HydrationReport,
    Issue,
    ValidationResult,
)
from triggergraph.session import EditingSession
from triggergraph.settings import EditorSettings

__all__ = [
    "__version__",
    "hydrate",
    "serialize",
    "fingerprint",
    "validate",
    "IssueCode",
    "ConditionRecord",
    "EdgeRecord",
    "HydrationReport",
    "Issue",
    "ValidationResult",
    "EditingSession",
    "EditorSettings",
]
