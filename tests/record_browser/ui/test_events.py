from __future__ import annotations

from record_browser.core.collection import Collection
from record_browser.core.filters import DateRange, Flag, MultiSelect, NumericRange
from record_browser.core.view_state import PaginationSpec, SortSpec, ViewState
from record_browser.services.data_source import InMemoryDataSource
from record_browser.services.view_state_store import ViewStateStore
from record_browser.ui.columns import product_columns
from record_browser.ui.events import RATING_ANY, apply_control_event, control_values
from record_browser.ui.ids import CLEAR_ALL_INDEX, IDs, filter_remove_id, page_link_id, sort_header_id

C = IDs.Control


def _make_store(state: ViewState | None = None) -> ViewStateStore:
    collection = Collection.from_records("Products", [{"id": 1, "name": "Lamp"}])
    return ViewStateStore(InMemoryDataSource(collection, latency_ms=0), state=state)


def _apply(store, triggered_id, value=None):
    return apply_control_event(store, triggered_id, value, product_columns())


def test_filter_controls_update_state():
    store = _make_store()

    assert _apply(store, C.CATEGORY_CHECKLIST, ["Books", "Home"])
    assert _apply(store, C.TAG_CHECKLIST, ["sale"])
    assert _apply(store, C.IN_STOCK_SWITCH, True)
    assert _apply(store, C.RATING_SELECT, "4")
    assert _apply(store, C.DATE_FROM, "2024-01-01")
    assert _apply(store, C.DATE_TO, "2024-02-01")
    assert _apply(store, C.PRICE_MIN, "5")

    assert store.state.filters == {
        "category": MultiSelect(("Books", "Home")),
        "tags": MultiSelect(("sale",)),
        "inStock": Flag(True),
        "rating": NumericRange(min=4),
        "date": DateRange("2024-01-01", "2024-02-01"),
        "price": NumericRange(min=5),
    }


def test_clearing_controls_removes_filters():
    store = _make_store(
        ViewState(filters={"category": MultiSelect(("Books",)), "inStock": Flag(True), "rating": NumericRange(min=3)})
    )

    assert _apply(store, C.CATEGORY_CHECKLIST, [])
    assert _apply(store, C.IN_STOCK_SWITCH, False)
    assert _apply(store, C.RATING_SELECT, RATING_ANY)

    assert store.state.filters == {}


def test_status_radio_all_removes_status_filter():
    store = _make_store()
    assert _apply(store, C.STATUS_RADIO, "archived")
    assert store.state.filters["status"] == MultiSelect(("archived",))

    assert _apply(store, C.STATUS_RADIO, "all")
    assert "status" not in store.state.filters


def test_invalid_price_is_ignored():
    store = _make_store(ViewState(filters={"price": NumericRange(10, 20)}))
    assert _apply(store, C.PRICE_MAX, "twenty") is False
    assert store.state.filters["price"] == NumericRange(10, 20)


def test_search_and_clear_buttons():
    store = _make_store(ViewState(filters={"category": MultiSelect(("Books",))}))

    assert _apply(store, C.SEARCH_INPUT, "lamp")
    assert store.state.search_term == "lamp"
    assert _apply(store, C.SEARCH_CLEAR_BTN, 1)
    assert store.state.search_term == ""
    assert _apply(store, C.CLEAR_FILTERS_BTN, 1)
    assert store.state.filters == {}


def test_sort_header_cycles_direction():
    store = _make_store()

    assert _apply(store, sort_header_id("price"), 1)
    assert store.state.sort == SortSpec("price", "asc")
    assert _apply(store, sort_header_id("price"), 2)
    assert store.state.sort == SortSpec("price", "desc")
    assert _apply(store, sort_header_id("tags"), 1) is False


def test_page_links_and_page_size():
    store = _make_store()

    assert _apply(store, page_link_id(3, "next"), 1)
    assert store.state.pagination.page == 3

    assert _apply(store, C.PAGE_SIZE_SELECT, "50")
    assert store.state.pagination == PaginationSpec(1, 50)
    assert _apply(store, C.PAGE_SIZE_SELECT, "13") is False


def test_badge_remove_and_clear_all():
    store = _make_store(ViewState(filters={"category": MultiSelect(("Books",)), "inStock": Flag(True)}))

    assert _apply(store, filter_remove_id("category"), 1)
    assert store.state.filters == {"inStock": Flag(True)}

    assert _apply(store, filter_remove_id(CLEAR_ALL_INDEX), 1)
    assert store.state.filters == {}


def test_tabs():
    store = _make_store()
    assert _apply(store, C.STATUS_TABS, "draft")
    assert store.state.active_tab == "draft"


def test_unknown_trigger_is_ignored():
    store = _make_store()
    assert _apply(store, "something-else", 1) is False
    assert _apply(store, {"type": "other", "index": 1}, 1) is False


def test_control_values_mirror_state():
    state = ViewState(
        filters={
            "status": MultiSelect(("active",)),
            "category": MultiSelect(("Books",)),
            "price": NumericRange(5, 99.5),
            "rating": NumericRange(min=4),
            "tags": MultiSelect(("sale", "new")),
            "inStock": Flag(True),
            "date": DateRange("2024-01-01", None),
        },
        search_term="lamp",
        pagination=PaginationSpec(2, 20),
        active_tab="archived",
    )

    values = control_values(state)

    assert values.as_tuple() == (
        "lamp",
        "active",
        ["Books"],
        "5",
        "99.5",
        "4",
        ["sale", "new"],
        True,
        "2024-01-01",
        None,
        "archived",
        "20",
    )


def test_control_values_for_default_state():
    values = control_values(ViewState())
    assert values.status == "all"
    assert values.rating == RATING_ANY
    assert values.price_min is None
    assert values.in_stock is False
