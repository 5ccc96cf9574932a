"""Public record and report models for triggergraph.

ConditionRecord / EdgeRecord describe what the owning form hands to the
editor. Legacy records may lack ``id``, ``x`` and ``y``; hydration fills them.
"""

import math
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from triggergraph.codes import IssueCode


def blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class ConditionRecord(BaseModel):
    """A condition as stored on the trigger record."""
    id: Optional[str] = None
    field: str
    operator: str
    value: Any = ""  # Coerced to a string payload at hydration
    x: Optional[float] = None
    y: Optional[float] = None

    model_config = ConfigDict(extra="ignore")  # Legacy records may carry e.g. "logic"

    @field_validator('id', mode='before')
    @classmethod
    def blank_id_is_missing(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator('field', 'operator')
    @classmethod
    def non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator('x', 'y', mode='before')
    @classmethod
    def unusable_coordinate_is_missing(cls, v: Any) -> Any:
        """Coordinates are layout only: an unusable one is re-placed, never fatal."""
        if v is None or isinstance(v, bool):
            return None
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number


class EdgeRecord(BaseModel):
    """A connection as stored on the trigger record."""
    id: Optional[str] = None
    source: str
    target: str

    model_config = ConfigDict(extra="ignore")

    @field_validator('id', mode='before')
    @classmethod
    def blank_id_is_missing(cls, v: Any) -> Any:
        return blank_to_none(v)


class Issue(BaseModel):
    """A single hydration or validation issue."""
    code: IssueCode
    message: str
    collection: Literal["snapshot", "conditions", "edges"]
    index: Optional[int] = None  # Position of the record in its input list
    element_id: Optional[str] = None


class HydrationReport(BaseModel):
    """What hydration had to repair or drop to build a valid graph."""
    fingerprint: str
    assigned_node_ids: List[str] = Field(default_factory=list)
    assigned_edge_ids: List[str] = Field(default_factory=list)
    repaired: List[Issue] = Field(default_factory=list)
    dropped: List[Issue] = Field(default_factory=list)

    @property
    def assigned_ids(self) -> bool:
        """True if any node or edge id was generated (needs persisting back)."""
        return bool(self.assigned_node_ids or self.assigned_edge_ids)


class ValidationResult(BaseModel):
    """Result of triggergraph.api.validate()."""
    ok: bool  # True if hydration would drop nothing
    errors: List[Issue]  # Records hydration would drop
    warnings: List[Issue]  # Repairs and catalog mismatches; never block
