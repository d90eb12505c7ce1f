from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from record_browser.core.columns import ColumnDef
from record_browser.core.filters import (
    DateRange,
    Flag,
    MultiSelect,
    NumericRange,
    format_number,
    parse_iso_date,
    parse_number,
)
from record_browser.core.table_controller import TableController
from record_browser.core.view_state import DEFAULT_TAB, ViewState
from record_browser.services.view_state_store import ViewStateStore
from record_browser.ui.ids import CLEAR_ALL_INDEX, IDs

logger = logging.getLogger(__name__)

TriggerId = Union[str, Dict[str, Any], None]

RATING_ANY = "any"


@dataclass(frozen=True)
class ControlValues:
    """Values the filter/pagination controls should show for a ViewState."""
    search: str
    status: str
    categories: List[str]
    price_min: Optional[str]
    price_max: Optional[str]
    rating: str
    tags: List[str]
    in_stock: bool
    date_from: Optional[str]
    date_to: Optional[str]
    tab: str
    page_size: str

    def as_tuple(self) -> tuple:
        return (
            self.search,
            self.status,
            self.categories,
            self.price_min,
            self.price_max,
            self.rating,
            self.tags,
            self.in_stock,
            self.date_from,
            self.date_to,
            self.tab,
            self.page_size,
        )


def control_values(state: ViewState) -> ControlValues:
    filters = state.filters

    status = filters.get("status")
    status_value = status.values[0] if isinstance(status, MultiSelect) and len(status.values) == 1 else DEFAULT_TAB

    category = filters.get("category")
    tags = filters.get("tags")

    price = filters.get("price")
    price_min = format_number(price.min) if isinstance(price, NumericRange) and price.min is not None else None
    price_max = format_number(price.max) if isinstance(price, NumericRange) and price.max is not None else None

    rating = filters.get("rating")
    rating_value = (
        format_number(rating.min)
        if isinstance(rating, NumericRange) and rating.min is not None
        else RATING_ANY
    )

    in_stock = filters.get("inStock")
    dates = filters.get("date")

    return ControlValues(
        search=state.search_term,
        status=status_value,
        categories=list(category.values) if isinstance(category, MultiSelect) else [],
        price_min=price_min,
        price_max=price_max,
        rating=rating_value,
        tags=list(tags.values) if isinstance(tags, MultiSelect) else [],
        in_stock=isinstance(in_stock, Flag) and in_stock.value,
        date_from=dates.start if isinstance(dates, DateRange) else None,
        date_to=dates.end if isinstance(dates, DateRange) else None,
        tab=state.active_tab,
        page_size=str(state.pagination.page_size),
    )


def _page_target(index: Any) -> Optional[int]:
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    return index


def apply_control_event(
    store: ViewStateStore,
    triggered_id: TriggerId,
    value: Any,
    columns: Sequence[ColumnDef],
) -> bool:
    """
    Translate one UI event into a store transition.

    :param triggered_id: component id (string) or pattern-matching id (dict)
    :param value: the triggering property's new value
    :return: True if the ViewState changed
    """
    state = store.state
    C = IDs.Control

    if isinstance(triggered_id, dict):
        kind = triggered_id.get("type")
        index = triggered_id.get("index")

        if kind == IDs.Pattern.SORT_HEADER:
            sort = TableController(columns).header_click(index, state.sort)
            return sort is not None and store.set_sort(sort.field, sort.direction)

        if kind == IDs.Pattern.PAGE_LINK:
            target = _page_target(index)
            return target is not None and store.set_page(target)

        if kind == IDs.Pattern.FILTER_REMOVE:
            if index == CLEAR_ALL_INDEX:
                return store.clear_filters()
            return store.remove_filter(index)

        logger.debug("Unhandled pattern event", extra={"trigger": str(triggered_id)})
        return False

    if triggered_id == C.SEARCH_INPUT:
        return store.set_search(value)
    if triggered_id == C.SEARCH_CLEAR_BTN:
        return store.set_search("")
    if triggered_id == C.CLEAR_FILTERS_BTN:
        return store.clear_filters()

    if triggered_id == C.STATUS_RADIO:
        if not value or value == DEFAULT_TAB:
            return store.remove_filter("status")
        return store.set_filter("status", MultiSelect((str(value),)))

    if triggered_id == C.CATEGORY_CHECKLIST:
        return store.set_filter("category", MultiSelect.of(value or []))
    if triggered_id == C.TAG_CHECKLIST:
        return store.set_filter("tags", MultiSelect.of(value or []))

    if triggered_id == C.PRICE_MIN:
        return store.update_range("price", min_text=value)
    if triggered_id == C.PRICE_MAX:
        return store.update_range("price", max_text=value)

    if triggered_id == C.RATING_SELECT:
        threshold = parse_number(value)
        if threshold is None:
            return store.remove_filter("rating")
        return store.set_filter("rating", NumericRange(min=threshold))

    if triggered_id == C.IN_STOCK_SWITCH:
        return store.set_filter("inStock", Flag(True) if value else None)

    if triggered_id in (C.DATE_FROM, C.DATE_TO):
        current = state.filters.get("date")
        start = current.start if isinstance(current, DateRange) else None
        end = current.end if isinstance(current, DateRange) else None
        if triggered_id == C.DATE_FROM:
            start = parse_iso_date(value)
        else:
            end = parse_iso_date(value)
        return store.set_filter("date", DateRange(start, end))

    if triggered_id == C.STATUS_TABS:
        return store.set_tab(value)

    if triggered_id == C.PAGE_SIZE_SELECT:
        size = parse_number(value)
        return size is not None and store.set_page_size(int(size))

    return False
