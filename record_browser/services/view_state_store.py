from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional

from record_browser.core.codec import ViewStateCodec
from record_browser.core.filters import (
    FilterSet,
    FilterValue,
    NumericRange,
    normalise_filters,
    parse_number,
)
from record_browser.core.view_state import (
    DEFAULT_TAB,
    PAGE_SIZE_OPTIONS,
    SORT_ASC,
    SORT_DIRECTIONS,
    TABS,
    PaginationSpec,
    SortSpec,
    ViewState,
)
from record_browser.services.data_source import DataSource

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

_UNSET = object()


@dataclass(frozen=True)
class Notification:
    """Non-fatal, dismissible message for the user."""
    title: str
    message: str
    level: str = "danger"


class ViewStateStore:
    """
    Single owner of the ViewState.

    Every mutation goes through a transition method below; filter, search,
    sort and tab changes go back to page 1, plain page navigation doesn't.
    After each transition the encoded URL is pushed to `on_url_change`.

    `refresh()` fetches the page for the current state. Each call takes a
    new token; a result is only applied if its token is still the latest,
    so a slow earlier query can never overwrite a newer one.
    """

    def __init__(
        self,
        source: DataSource,
        state: Optional[ViewState] = None,
        codec: Optional[ViewStateCodec] = None,
        notify: Optional[Callable[[Notification], None]] = None,
        on_url_change: Optional[Callable[[str], None]] = None,
        clamp_pages: bool = True,
    ):
        self.source = source
        self.codec = codec or ViewStateCodec()
        self.notify = notify
        self.on_url_change = on_url_change
        self.clamp_pages = clamp_pages

        self._state = state or ViewState()
        self._latest_token = 0

        self.items: List[Record] = []
        self.selected_items: List[Record] = []
        self.loading = False
        self.last_error: Optional[str] = None

    @classmethod
    def from_url(cls, source: DataSource, query_string: Optional[str], **kwargs) -> ViewStateStore:
        codec = kwargs.pop("codec", None) or ViewStateCodec()
        return cls(source, state=codec.decode(query_string), codec=codec, **kwargs)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def pagination(self) -> PaginationSpec:
        return self._state.pagination

    def url(self) -> str:
        return self.codec.encode(self._state)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _commit(self, new_state: ViewState, reset_page: bool) -> bool:
        # a no-op transition must not bounce the user back to page 1
        if new_state == self._state:
            return False
        if reset_page:
            new_state = replace(new_state, pagination=replace(new_state.pagination, page=1))
        self._state = new_state
        if self.on_url_change is not None:
            self.on_url_change(self.url())
        return True

    def replace_state(self, state: ViewState) -> bool:
        """Adopt a state wholesale (e.g. after the URL changed under us)."""
        return self._commit(state, reset_page=False)

    def set_filters(self, filters: Mapping[str, FilterValue]) -> bool:
        return self._commit(replace(self._state, filters=normalise_filters(filters)), reset_page=True)

    def set_filter(self, key: str, value: Optional[FilterValue]) -> bool:
        filters: FilterSet = dict(self._state.filters)
        if value is None:
            filters.pop(key, None)
        else:
            filters[key] = value
        return self.set_filters(filters)

    def remove_filter(self, key: str) -> bool:
        return self.set_filter(key, None)

    def clear_filters(self) -> bool:
        return self.set_filters({})

    def update_range(self, key: str, min_text: Any = _UNSET, max_text: Any = _UNSET) -> bool:
        """
        Update one or both bounds of a numeric range from raw user input.

        Blank input clears a bound; non-numeric input is ignored and the
        previous bound is kept.
        """
        current = self._state.filters.get(key)
        low = current.min if isinstance(current, NumericRange) else None
        high = current.max if isinstance(current, NumericRange) else None

        def resolve(text: Any, previous: Optional[float]) -> Optional[float]:
            if text is _UNSET:
                return previous
            if text is None or (isinstance(text, str) and not text.strip()):
                return None
            number = parse_number(text)
            if number is None:
                logger.debug("Ignoring non-numeric range input", extra={"filter": key, "input": str(text)})
                return previous
            return number

        updated = NumericRange(resolve(min_text, low), resolve(max_text, high))
        if (updated.min, updated.max) == (low, high):
            return False
        return self.set_filter(key, updated)

    def set_search(self, term: Optional[str]) -> bool:
        return self._commit(replace(self._state, search_term=term or ""), reset_page=True)

    def set_sort(self, field: str, direction: str = SORT_ASC) -> bool:
        if not field or direction not in SORT_DIRECTIONS:
            return False
        return self._commit(replace(self._state, sort=SortSpec(field, direction)), reset_page=True)

    def set_tab(self, tab: Optional[str]) -> bool:
        tab = tab if tab in TABS else DEFAULT_TAB
        return self._commit(replace(self._state, active_tab=tab), reset_page=True)

    def set_page(self, page: int) -> bool:
        if page < 1:
            return False
        pagination = replace(self._state.pagination, page=page)
        return self._commit(replace(self._state, pagination=pagination), reset_page=False)

    def set_page_size(self, page_size: int) -> bool:
        if page_size not in PAGE_SIZE_OPTIONS:
            return False
        pagination = replace(self._state.pagination, page=1, page_size=page_size).with_total(
            self._state.pagination.total
        )
        return self._commit(replace(self._state, pagination=pagination), reset_page=False)

    def on_selection_change(self, items: List[Record]) -> None:
        """Callback for TableController: keeps the materialised selection."""
        self.selected_items = list(items)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    async def refresh(self) -> bool:
        """
        Fetch the page for the current state. Returns True if the result was
        applied, False if it failed, was superseded by a newer refresh, or the
        state changed while it was in flight.
        """
        self._latest_token += 1
        token = self._latest_token
        state = self._state
        self.loading = True

        try:
            result = await self.source.fetch(
                page=state.pagination.page,
                page_size=state.pagination.page_size,
                filters=state.effective_filters(),
                sort_field=state.sort.field,
                sort_direction=state.sort.direction,
                search_term=state.search_term,
            )
        except Exception as e:
            if token != self._latest_token:
                logger.debug("stale_failure_discarded", extra={"token": token, "latest": self._latest_token})
                return False
            logger.exception("fetch_failed", extra={"token": token, "url": self.codec.encode(state)})
            self.last_error = str(e)
            if self.notify is not None:
                self.notify(Notification("Error", "Failed to load records. Please try again."))
            return False
        finally:
            if token == self._latest_token:
                self.loading = False

        if token != self._latest_token:
            logger.debug("stale_result_discarded", extra={"token": token, "latest": self._latest_token})
            return False
        if self._state != state:
            # a transition landed mid-flight; this page belongs to the old state
            logger.debug("state_changed_result_discarded", extra={"token": token, "url": self.url()})
            return False

        self.items = list(result.data)
        self.last_error = None
        pagination = replace(
            state.pagination,
            total=result.pagination.total,
            total_pages=result.pagination.total_pages,
        )
        self._state = replace(state, pagination=pagination)

        logger.info(
            "page_loaded",
            extra={"token": token, "page": pagination.page, "total": pagination.total},
        )

        if self.clamp_pages and 0 < pagination.total_pages < pagination.page:
            logger.info(
                "page_clamped",
                extra={"requested": pagination.page, "last_page": pagination.total_pages},
            )
            self.set_page(pagination.total_pages)
            return await self.refresh()

        return True

    def refresh_blocking(self) -> bool:
        """Run refresh() to completion from synchronous code (e.g. a Dash callback)."""
        return asyncio.run(self.refresh())
