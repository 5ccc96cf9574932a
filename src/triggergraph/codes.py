"""Issue code constants for hydration reports and triggergraph.api.validate().

These constants prevent stringly-typed issue codes and ensure
client code uses the correct codes.
"""

from enum import Enum


class IssueCode(str, Enum):
    """Hydration and validation issue codes."""

    # Errors (the record is dropped during hydration)
    INVALID_SNAPSHOT = "INVALID_SNAPSHOT"
    INVALID_CONDITION = "INVALID_CONDITION"
    INVALID_EDGE = "INVALID_EDGE"
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"
    DUPLICATE_EDGE_ID = "DUPLICATE_EDGE_ID"
    DANGLING_EDGE = "DANGLING_EDGE"

    # Repairs (hydration fills the gap; the record is kept)
    MISSING_NODE_ID = "MISSING_NODE_ID"
    MISSING_EDGE_ID = "MISSING_EDGE_ID"
    MISSING_POSITION = "MISSING_POSITION"

    # Warnings (carried verbatim; reported by validate only)
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    UNKNOWN_OPERATOR = "UNKNOWN_OPERATOR"
    OPERATOR_NOT_ALLOWED = "OPERATOR_NOT_ALLOWED"
    EMPTY_VALUE = "EMPTY_VALUE"
