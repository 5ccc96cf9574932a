"""Default node placement."""

from pydantic import BaseModel, ConfigDict

from .model import Position


class Layout(BaseModel):
    """Single-column placement used for new and position-less nodes.

    Slot ``i`` sits at ``(column_x, i * row_spacing + row_offset)``.
    """
    column_x: float = 250
    row_spacing: float = 180
    row_offset: float = 50

    model_config = ConfigDict(extra="forbid", frozen=True)

    def slot_x(self) -> float:
        return self.column_x

    def slot_y(self, index: int) -> float:
        return index * self.row_spacing + self.row_offset

    def slot(self, index: int) -> Position:
        return Position(x=self.slot_x(), y=self.slot_y(index))


DEFAULT_LAYOUT = Layout()
