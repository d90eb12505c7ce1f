from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

MIN_COLUMN_WIDTH = 100
DEFAULT_COLUMN_WIDTH = 150

Record = Mapping[str, Any]
Accessor = Union[str, Callable[[Record], Any]]


@dataclass(frozen=True)
class ColumnDef:
    """
    Caller-supplied description of one table column.

    :param id: stable column id, also the sort field when sortable
    :param header: header label
    :param accessor: record key, or a function deriving the value from a record
    :param cell: optional renderer returning presentation content for a record
    :param sortable: whether clicking the header changes the sort
    :param width: initial pixel width (DEFAULT_COLUMN_WIDTH when None)
    :param min_width: lower bound while resizing (never below MIN_COLUMN_WIDTH)
    :param max_width: optional upper bound while resizing
    """
    id: str
    header: str
    accessor: Accessor
    cell: Optional[Callable[[Record], Any]] = None
    sortable: bool = False
    width: Optional[int] = None
    min_width: Optional[int] = None
    max_width: Optional[int] = None

    def value(self, record: Record) -> Any:
        if callable(self.accessor):
            return self.accessor(record)
        return record.get(self.accessor)

    def render(self, record: Record) -> Any:
        """Cell content: the custom renderer, else the stringified accessor value."""
        if self.cell is not None:
            return self.cell(record)
        value = self.value(record)
        return "" if value is None else str(value)

    @property
    def initial_width(self) -> int:
        return self.clamp(self.width if self.width else DEFAULT_COLUMN_WIDTH)

    def clamp(self, width: float) -> int:
        lower = max(MIN_COLUMN_WIDTH, self.min_width or 0)
        clamped = max(lower, width)
        if self.max_width is not None:
            clamped = min(clamped, max(lower, self.max_width))
        return int(round(clamped))


def default_widths(columns) -> Dict[str, int]:
    return {column.id: column.initial_width for column in columns}
