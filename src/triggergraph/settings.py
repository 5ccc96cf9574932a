"""Editor configuration."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from triggergraph.kernel.catalog import DEFAULT_FIELD, DEFAULT_OPERATOR, is_operator_allowed, lookup_field
from triggergraph.kernel.layout import Layout


class EditorSettings(BaseModel):
    """Defaults for new conditions, placement and id prefixes."""
    layout: Layout = Field(default_factory=Layout)
    default_field: str = DEFAULT_FIELD
    default_operator: str = DEFAULT_OPERATOR
    node_id_prefix: str = "cond"
    edge_id_prefix: str = "edge"

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def check_defaults(self) -> "EditorSettings":
        """New conditions must start out legal for their field."""
        if lookup_field(self.default_field) is None:
            raise ValueError(f"default_field '{self.default_field}' is not a catalog field")
        if not is_operator_allowed(self.default_field, self.default_operator):
            raise ValueError(
                f"default_operator '{self.default_operator}' is not allowed for field '{self.default_field}'"
            )
        if self.node_id_prefix == self.edge_id_prefix:
            raise ValueError("node_id_prefix and edge_id_prefix must differ")
        return self


DEFAULT_SETTINGS = EditorSettings()
