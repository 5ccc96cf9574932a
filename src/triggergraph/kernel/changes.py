"""Change batches reported by the interactive canvas.

The canvas reports drags, selection and deletions as lists of small change
records. They are parsed into discriminated pydantic models so plain dicts
coming from the presentation layer and model instances are handled alike.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from triggergraph.contracts import blank_to_none

from .model import Position

logger = logging.getLogger(__name__)


class NodePositionChange(BaseModel):
    type: Literal["position"] = "position"
    id: str
    position: Optional[Position] = None  # None while a drag reports no coordinates
    dragging: bool = False

    model_config = ConfigDict(extra="ignore", frozen=True)


class NodeSelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool

    model_config = ConfigDict(extra="ignore", frozen=True)


class NodeRemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str

    model_config = ConfigDict(extra="ignore", frozen=True)


NodeChange = Annotated[
    Union[NodePositionChange, NodeSelectChange, NodeRemoveChange],
    Field(discriminator="type"),
]


class NewEdge(BaseModel):
    source: str
    target: str
    id: Optional[str] = None

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator('id', mode='before')
    @classmethod
    def blank_id_is_missing(cls, v: Any) -> Any:
        return blank_to_none(v)


class EdgeAddChange(BaseModel):
    type: Literal["add"] = "add"
    item: NewEdge

    model_config = ConfigDict(extra="ignore", frozen=True)


class EdgeSelectChange(BaseModel):
    type: Literal["select"] = "select"
    id: str
    selected: bool

    model_config = ConfigDict(extra="ignore", frozen=True)


class EdgeRemoveChange(BaseModel):
    type: Literal["remove"] = "remove"
    id: str

    model_config = ConfigDict(extra="ignore", frozen=True)


EdgeChange = Annotated[
    Union[EdgeAddChange, EdgeSelectChange, EdgeRemoveChange],
    Field(discriminator="type"),
]

_NODE_CHANGE = TypeAdapter(NodeChange)
_EDGE_CHANGE = TypeAdapter(EdgeChange)


def _parse_batch(adapter: TypeAdapter, changes: Iterable[Any], kind: str) -> list:
    parsed = []
    for index, change in enumerate(changes):
        try:
            parsed.append(adapter.validate_python(change))
        except ValidationError as e:
            logger.warning("Dropping malformed %s change at index %d: %s", kind, index, e)
    return parsed


def parse_node_changes(changes: Iterable[Any]) -> List[NodeChange]:
    """Parse a batch of node changes (models or dicts), preserving order.

    Records of an unknown shape are logged and dropped.
    """
    return _parse_batch(_NODE_CHANGE, changes, "node")


def parse_edge_changes(changes: Iterable[Any]) -> List[EdgeChange]:
    """Parse a batch of edge changes (models or dicts), preserving order."""
    return _parse_batch(_EDGE_CHANGE, changes, "edge")
