from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from record_browser.core.filters import (
    FilterSet,
    MultiSelect,
    filter_from_dict,
    filter_to_dict,
    normalise_filters,
)

SORT_ASC = "asc"
SORT_DESC = "desc"
SORT_DIRECTIONS = (SORT_ASC, SORT_DESC)

PAGE_SIZE_OPTIONS = (10, 20, 50, 100)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT_FIELD = "name"
DEFAULT_SORT_DIRECTION = SORT_ASC
DEFAULT_TAB = "all"

TABS = ("all", "active", "archived", "draft")


@dataclass(frozen=True)
class SortSpec:
    field: str = DEFAULT_SORT_FIELD
    direction: str = DEFAULT_SORT_DIRECTION

    @property
    def descending(self) -> bool:
        return self.direction == SORT_DESC

    def flipped(self) -> SortSpec:
        return replace(self, direction=SORT_ASC if self.descending else SORT_DESC)


def total_pages_for(total: int, page_size: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


@dataclass(frozen=True)
class PaginationSpec:
    """
    Requested page plus the metadata of the last result.

    total / total_pages come back from the data source, never from the URL,
    so they are excluded from equality.
    """
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    total: int = field(default=0, compare=False)
    total_pages: int = field(default=0, compare=False)

    def with_total(self, total: int) -> PaginationSpec:
        return replace(self, total=total, total_pages=total_pages_for(total, self.page_size))

    @property
    def first_item(self) -> int:
        """1-based index of the first item on this page (0 when empty)."""
        if self.total == 0:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_item(self) -> int:
        return min(self.page * self.page_size, self.total)


@dataclass(frozen=True)
class ViewState:
    """
    Complete, URL-persistable description of what the user is looking at.

    Fields:

    - filters: active FilterSet (normalised, no empty selections)
    - search_term: free-text search, "" when unused
    - sort: the single active SortSpec
    - pagination: requested page/page size (+ last known totals)
    - active_tab: status shortcut ("all" means no status constraint)
    """

    filters: FilterSet = field(default_factory=dict)
    search_term: str = ""
    sort: SortSpec = field(default_factory=SortSpec)
    pagination: PaginationSpec = field(default_factory=PaginationSpec)
    active_tab: str = DEFAULT_TAB

    def __post_init__(self):
        object.__setattr__(self, "filters", normalise_filters(self.filters))

    def effective_filters(self) -> FilterSet:
        """
        Filters actually sent to the data source: the tab, when not "all",
        replaces any status filter.
        """
        filters = dict(self.filters)
        if self.active_tab and self.active_tab != DEFAULT_TAB:
            filters["status"] = MultiSelect((self.active_tab,))
        return filters

    def has_active_filters(self) -> bool:
        return bool(self.filters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters": {key: filter_to_dict(value) for key, value in self.filters.items()},
            "search_term": self.search_term,
            "sort": {"field": self.sort.field, "direction": self.sort.direction},
            "pagination": {
                "page": self.pagination.page,
                "page_size": self.pagination.page_size,
                "total": self.pagination.total,
                "total_pages": self.pagination.total_pages,
            },
            "active_tab": self.active_tab,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> ViewState:
        data = data or {}
        sort = data.get("sort") or {}
        pagination = data.get("pagination") or {}
        return cls(
            filters={
                key: filter_from_dict(value)
                for key, value in (data.get("filters") or {}).items()
            },
            search_term=str(data.get("search_term", "")),
            sort=SortSpec(
                field=sort.get("field", DEFAULT_SORT_FIELD),
                direction=sort.get("direction", DEFAULT_SORT_DIRECTION),
            ),
            pagination=PaginationSpec(
                page=int(pagination.get("page", DEFAULT_PAGE)),
                page_size=int(pagination.get("page_size", DEFAULT_PAGE_SIZE)),
                total=int(pagination.get("total", 0)),
                total_pages=int(pagination.get("total_pages", 0)),
            ),
            active_tab=data.get("active_tab", DEFAULT_TAB),
        )
