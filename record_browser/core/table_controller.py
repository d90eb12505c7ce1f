from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from record_browser.core.columns import ColumnDef, Record, default_widths
from record_browser.core.view_state import SORT_ASC, SortSpec

logger = logging.getLogger(__name__)

# Pointer movements of this many pixels or fewer are not applied yet
RESIZE_DEAD_ZONE = 1


@dataclass
class ResizeSession:
    """
    In-progress column drag.

    last_x is the most recent applied pointer position, not the drag origin:
    each move adds the delta since the previous applied move.
    """
    column_id: str
    last_x: float


class TableController:
    """
    Interactive state layered over one rendered page of records.

    Owns:
    - the selection (ids of the loaded page only)
    - per-column pixel widths and the active resize drag
    - sort-toggle logic for header clicks

    None of this is part of the URL; it is reset whenever the column set or
    the dataset identity changes.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDef],
        dataset_key: Optional[str] = None,
        id_field: str = "id",
        on_selection_change: Optional[Callable[[List[Record]], None]] = None,
    ):
        self.id_field = id_field
        self.on_selection_change = on_selection_change
        self.columns: List[ColumnDef] = []
        self.dataset_key: Optional[str] = None

        self._rows: List[Record] = []
        self._row_ids: List[Any] = []
        self._selected: set = set()
        self._widths: Dict[str, int] = {}
        self._resize: Optional[ResizeSession] = None

        self.reset(columns, dataset_key)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self, columns: Sequence[ColumnDef], dataset_key: Optional[str] = None) -> None:
        """Fresh widths, empty selection, no drag."""
        self.columns = list(columns)
        self._columns_by_id = {column.id: column for column in self.columns}
        self.dataset_key = dataset_key
        self._widths = default_widths(self.columns)
        self._resize = None
        had_selection = bool(self._selected)
        self._selected = set()
        if had_selection:
            self._notify_selection()

    def sync(self, columns: Sequence[ColumnDef], dataset_key: Optional[str]) -> bool:
        """Reset if the column set or dataset changed. Returns True if it did."""
        if [c.id for c in columns] == [c.id for c in self.columns] and dataset_key == self.dataset_key:
            return False
        logger.debug("Resetting table state", extra={"dataset_key": dataset_key})
        self.reset(columns, dataset_key)
        return True

    def load_rows(self, rows: Iterable[Record]) -> None:
        """
        Show a new page of records. Selection survives only when the page
        holds exactly the same ids; any other page starts unselected.
        """
        rows = list(rows)
        row_ids = [row[self.id_field] for row in rows]
        same_page = set(row_ids) == set(self._row_ids)

        self._rows = rows
        self._row_ids = row_ids

        if not same_page and self._selected:
            self._selected = set()
            self._notify_selection()

    @property
    def rows(self) -> List[Record]:
        return list(self._rows)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selected_ids(self) -> frozenset:
        return frozenset(self._selected)

    @property
    def selected_count(self) -> int:
        return len(self._selected)

    def is_selected(self, row_id: Any) -> bool:
        return row_id in self._selected

    @property
    def all_selected(self) -> bool:
        return bool(self._row_ids) and all(row_id in self._selected for row_id in self._row_ids)

    @property
    def some_selected(self) -> bool:
        """At least one but not every row on the page (the header's indeterminate state)."""
        return any(row_id in self._selected for row_id in self._row_ids) and not self.all_selected

    def selected_items(self) -> List[Record]:
        return [row for row in self._rows if row[self.id_field] in self._selected]

    def toggle_row(self, row_id: Any) -> None:
        if row_id not in self._row_ids:
            logger.debug("Ignoring toggle for row not on page", extra={"row_id": str(row_id)})
            return
        if row_id in self._selected:
            self._selected.discard(row_id)
        else:
            self._selected.add(row_id)
        self._notify_selection()

    def toggle_all(self) -> None:
        if self.all_selected:
            self._selected = set()
        else:
            self._selected = set(self._row_ids)
        self._notify_selection()

    def clear_selection(self) -> None:
        if not self._selected:
            return
        self._selected = set()
        self._notify_selection()

    def _notify_selection(self) -> None:
        if self.on_selection_change is not None:
            self.on_selection_change(self.selected_items())

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------
    def header_click(self, column_id: str, current: SortSpec) -> Optional[SortSpec]:
        """
        New sort for a header click: the active column flips direction, any
        other sortable column becomes the sort field ascending. Returns None
        for columns that can't be sorted.
        """
        column = self._columns_by_id.get(column_id)
        if column is None or not column.sortable:
            return None
        if current.field == column_id:
            return current.flipped()
        return SortSpec(field=column_id, direction=SORT_ASC)

    # ------------------------------------------------------------------
    # Column widths / resizing
    # ------------------------------------------------------------------
    @property
    def widths(self) -> Dict[str, int]:
        return dict(self._widths)

    def width_of(self, column_id: str) -> int:
        return self._widths[column_id]

    @property
    def resize_session(self) -> Optional[ResizeSession]:
        return self._resize

    def begin_resize(self, column_id: str, x: float) -> Optional[ResizeSession]:
        if column_id not in self._columns_by_id:
            return None
        self._resize = ResizeSession(column_id=column_id, last_x=x)
        return self._resize

    def resize_move(self, x: float) -> Optional[int]:
        """
        Apply one pointer move of the active drag. Returns the column's width,
        or None when no drag is active.
        """
        session = self._resize
        if session is None:
            return None

        delta = x - session.last_x
        if abs(delta) > RESIZE_DEAD_ZONE:
            column = self._columns_by_id[session.column_id]
            self._widths[session.column_id] = column.clamp(self._widths[session.column_id] + delta)
            session.last_x = x
        return self._widths[session.column_id]

    def end_resize(self) -> None:
        self._resize = None

    # ------------------------------------------------------------------
    # Serialisation for dcc.Store payloads
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "dataset_key": self.dataset_key,
            "column_ids": [column.id for column in self.columns],
            "row_ids": list(self._row_ids),
            "selected": [row_id for row_id in self._row_ids if row_id in self._selected],
            "widths": dict(self._widths),
        }

    @classmethod
    def from_dict(
        cls,
        data: Optional[Dict[str, Any]],
        columns: Sequence[ColumnDef],
        dataset_key: Optional[str] = None,
        id_field: str = "id",
    ) -> TableController:
        """Rebuild from a store payload; stale payloads (other columns/dataset) start fresh."""
        controller = cls(columns, dataset_key=dataset_key, id_field=id_field)
        if not isinstance(data, dict):
            return controller
        if data.get("dataset_key") != dataset_key or data.get("column_ids") != [c.id for c in columns]:
            return controller

        controller._row_ids = list(data.get("row_ids") or [])
        controller._selected = {row_id for row_id in data.get("selected") or [] if row_id in controller._row_ids}
        for column_id, width in (data.get("widths") or {}).items():
            column = controller._columns_by_id.get(column_id)
            if column is not None and isinstance(width, (int, float)):
                controller._widths[column_id] = column.clamp(width)
        return controller
