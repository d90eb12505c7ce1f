"""
Core domain layer: record collection, filters, view state, query engine,
URL codec, pagination window and table controller
"""

from .collection import Collection
from .codec import ViewStateCodec
from .columns import ColumnDef
from .filters import DateRange, FilterRegistry, Flag, MultiSelect, NumericRange, Text
from .pagination import page_window
from .query_engine import QueryResult, query
from .table_controller import TableController
from .view_state import PaginationSpec, SortSpec, ViewState

__all__ = [
    "Collection",
    "ViewStateCodec",
    "ColumnDef",
    "DateRange",
    "FilterRegistry",
    "Flag",
    "MultiSelect",
    "NumericRange",
    "Text",
    "page_window",
    "QueryResult",
    "query",
    "TableController",
    "PaginationSpec",
    "SortSpec",
    "ViewState",
]
