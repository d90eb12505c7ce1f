from __future__ import annotations

import asyncio
from urllib.parse import parse_qsl

from record_browser.core.collection import Collection
from record_browser.core.exceptions import DataSourceError
from record_browser.core.filters import MultiSelect, NumericRange
from record_browser.core.query_engine import query
from record_browser.core.view_state import PaginationSpec, SortSpec, ViewState
from record_browser.services.data_source import DataSource, FetchResult, InMemoryDataSource
from record_browser.services.view_state_store import ViewStateStore


def _make_collection(n: int = 24) -> Collection:
    records = [
        {
            "id": i,
            "name": f"Product {i:02d}",
            "category": "Books" if i % 2 else "Home",
            "price": float(i),
            "stock": i % 3,
            "rating": 3.0 + (i % 3),
            "dateAdded": "2024-01-01",
            "tags": ["even"] if i % 2 == 0 else ["odd"],
            "status": "active" if i % 4 else "draft",
            "description": "",
        }
        for i in range(1, n + 1)
    ]
    return Collection.from_records("Products", records)


class GatedSource(DataSource):
    """Each fetch blocks until the test releases its gate; can be told to fail."""

    def __init__(self, collection: Collection):
        self.collection = collection
        self.gates = []
        self.fail_next = []

    async def fetch(self, page, page_size, filters, sort_field, sort_direction, search_term):
        gate = asyncio.Event()
        self.gates.append(gate)
        fail = self.fail_next.pop(0) if self.fail_next else False
        await gate.wait()
        if fail:
            raise DataSourceError("backend unavailable")
        result = query(self.collection, filters, search_term, SortSpec(sort_field, sort_direction), page, page_size)
        return FetchResult(
            data=result.items,
            pagination=PaginationSpec(page, page_size, result.total, result.total_pages),
        )


class FlakySource(InMemoryDataSource):
    def __init__(self, collection: Collection):
        super().__init__(collection, latency_ms=0)
        self.fail = False

    async def fetch(self, *args, **kwargs):
        if self.fail:
            raise DataSourceError("backend unavailable")
        return await super().fetch(*args, **kwargs)


def _ids(items):
    return [item["id"] for item in items]


# -------------------------------------------------------------------------
# Transitions
# -------------------------------------------------------------------------
def test_filter_search_sort_and_tab_changes_reset_page():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))

    for change in (
        lambda: store.set_filter("category", MultiSelect(("Books",))),
        lambda: store.set_search("product"),
        lambda: store.set_sort("price", "desc"),
        lambda: store.set_tab("active"),
        lambda: store.set_page_size(20),
    ):
        store.set_page(3)
        assert change() is True
        assert store.state.pagination.page == 1


def test_page_navigation_keeps_everything_else():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))
    store.set_search("product")

    assert store.set_page(2) is True
    assert store.state.search_term == "product"
    assert store.state.pagination.page == 2
    assert store.set_page(0) is False


def test_noop_transition_keeps_page():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))
    store.set_page(3)

    assert store.remove_filter("category") is False
    assert store.set_search("") is False
    assert store.state.pagination.page == 3


def test_invalid_page_size_and_direction_are_ignored():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))

    assert store.set_page_size(7) is False
    assert store.set_sort("price", "sideways") is False
    assert store.state == ViewState()


def test_unknown_tab_falls_back_to_all():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0), state=ViewState(active_tab="draft"))
    store.set_tab("bogus")
    assert store.state.active_tab == "all"


def test_update_range_ignores_non_numeric_input():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))

    assert store.update_range("price", min_text="10") is True
    assert store.update_range("price", max_text="50") is True
    store.set_page(2)

    assert store.update_range("price", max_text="abc") is False
    assert store.state.filters["price"] == NumericRange(10, 50)
    assert store.state.pagination.page == 2

    assert store.update_range("price", min_text="  ") is True
    assert store.state.filters["price"] == NumericRange(None, 50)


def test_every_transition_pushes_url():
    urls = []
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0), on_url_change=urls.append)

    store.set_filter("category", MultiSelect(("Books", "Home")))
    store.set_page(2)
    store.set_page(2)

    assert len(urls) == 2
    pairs = parse_qsl(urls[-1])
    assert ("page", "2") in pairs
    assert ("category[]", "Books") in pairs
    assert ("category[]", "Home") in pairs


def test_from_url_decodes_state():
    store = ViewStateStore.from_url(
        InMemoryDataSource(_make_collection(), latency_ms=0),
        "?page=2&pageSize=20&sort=price&order=desc&tab=active",
    )
    assert store.state.pagination == PaginationSpec(2, 20)
    assert store.state.sort == SortSpec("price", "desc")
    assert store.state.active_tab == "active"


# -------------------------------------------------------------------------
# Fetching
# -------------------------------------------------------------------------
def test_refresh_loads_page_and_totals():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))

    assert store.refresh_blocking() is True

    assert _ids(store.items) == list(range(1, 11))
    assert store.state.pagination.total == 24
    assert store.state.pagination.total_pages == 3
    assert store.loading is False


def test_tab_is_applied_as_status_filter():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0), state=ViewState(active_tab="draft"))
    store.refresh_blocking()

    assert _ids(store.items) == [4, 8, 12, 16, 20, 24]


def test_stale_result_is_discarded():
    source = GatedSource(_make_collection())
    store = ViewStateStore(source)

    async def scenario():
        first = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        store.set_filter("category", MultiSelect(("Home",)))
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        assert store.loading is True

        # newer request finishes first
        source.gates[1].set()
        assert await second is True
        assert store.loading is False

        # the older one arrives late and must not overwrite anything
        source.gates[0].set()
        assert await first is False

    asyncio.run(scenario())

    assert all(item["category"] == "Home" for item in store.items)
    assert store.state.pagination.total == 12
    assert store.loading is False


def test_result_for_a_state_changed_mid_flight_is_discarded():
    source = GatedSource(_make_collection())
    store = ViewStateStore(source)

    async def scenario():
        pending = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        # a transition without a follow-up refresh
        store.set_page(2)

        source.gates[0].set()
        assert await pending is False

    asyncio.run(scenario())

    assert store.items == []
    assert store.state.pagination.page == 2
    assert store.state.pagination.total == 0
    assert store.loading is False

    # the next refresh serves the state that is actually current
    async def retry():
        pending = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        source.gates[1].set()
        return await pending

    assert asyncio.run(retry()) is True
    assert _ids(store.items) == list(range(11, 21))
    assert store.state.pagination.total == 24


def test_failure_keeps_previous_page_and_notifies():
    notes = []
    source = FlakySource(_make_collection())
    store = ViewStateStore(source, notify=notes.append)
    store.refresh_blocking()
    before = list(store.items)

    source.fail = True
    store.set_page(2)
    assert store.refresh_blocking() is False

    assert store.items == before
    assert store.loading is False
    assert store.last_error == "backend unavailable"
    assert len(notes) == 1
    assert notes[0].level == "danger"

    # the requested state still stands, retrying succeeds
    assert store.state.pagination.page == 2
    source.fail = False
    assert store.refresh_blocking() is True
    assert store.last_error is None
    assert _ids(store.items) == list(range(11, 21))


def test_stale_failure_is_silent():
    notes = []
    source = GatedSource(_make_collection())
    source.fail_next = [True, False]
    store = ViewStateStore(source, notify=notes.append)

    async def scenario():
        first = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)
        second = asyncio.create_task(store.refresh())
        await asyncio.sleep(0)

        source.gates[1].set()
        await second
        source.gates[0].set()
        assert await first is False

    asyncio.run(scenario())

    assert notes == []
    assert store.last_error is None
    assert len(store.items) == 10


def test_page_past_the_end_is_clamped_to_last_page():
    urls = []
    store = ViewStateStore.from_url(
        InMemoryDataSource(_make_collection(), latency_ms=0),
        "page=9",
        on_url_change=urls.append,
    )

    assert store.refresh_blocking() is True

    assert store.state.pagination.page == 3
    assert _ids(store.items) == [21, 22, 23, 24]
    assert ("page", "3") in parse_qsl(urls[-1])


def test_clamping_can_be_disabled():
    store = ViewStateStore.from_url(
        InMemoryDataSource(_make_collection(), latency_ms=0),
        "page=9",
        clamp_pages=False,
    )
    store.refresh_blocking()

    assert store.state.pagination.page == 9
    assert store.items == []


def test_empty_result_is_not_clamped():
    store = ViewStateStore.from_url(InMemoryDataSource(_make_collection(), latency_ms=0), "page=2&q=zzz")
    store.refresh_blocking()

    assert store.items == []
    assert store.state.pagination.page == 2
    assert store.state.pagination.total_pages == 0


def test_selection_callback_keeps_items():
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0))
    store.on_selection_change([{"id": 1}])
    assert store.selected_items == [{"id": 1}]


def test_replace_state_adopts_without_page_reset():
    urls = []
    store = ViewStateStore(InMemoryDataSource(_make_collection(), latency_ms=0), on_url_change=urls.append)
    target = ViewState(search_term="product", pagination=PaginationSpec(2, 10))

    assert store.replace_state(target) is True
    assert store.state == target
    assert store.replace_state(target) is False
    assert len(urls) == 1
