from record_browser.core.filters import MultiSelect, NumericRange
from record_browser.core.view_state import PaginationSpec, SortSpec, ViewState, total_pages_for


def test_defaults():
    state = ViewState()
    assert state.filters == {}
    assert state.search_term == ""
    assert state.sort == SortSpec("name", "asc")
    assert state.pagination == PaginationSpec(1, 10)
    assert state.active_tab == "all"


def test_empty_filters_are_dropped_on_construction():
    state = ViewState(filters={"category": MultiSelect(()), "price": NumericRange(min=5)})
    assert state.filters == {"price": NumericRange(min=5)}


def test_totals_do_not_affect_equality():
    a = PaginationSpec(2, 20, total=100, total_pages=5)
    b = PaginationSpec(2, 20)
    assert a == b


def test_total_pages_and_item_range():
    assert total_pages_for(0, 10) == 0
    assert total_pages_for(10, 10) == 1
    assert total_pages_for(11, 10) == 2

    pagination = PaginationSpec(3, 10).with_total(25)
    assert pagination.total_pages == 3
    assert pagination.first_item == 21
    assert pagination.last_item == 25


def test_tab_overrides_status_filter():
    state = ViewState(filters={"status": MultiSelect(("draft",))}, active_tab="active")
    assert state.effective_filters()["status"] == MultiSelect(("active",))

    state = ViewState(filters={"status": MultiSelect(("draft",))}, active_tab="all")
    assert state.effective_filters()["status"] == MultiSelect(("draft",))


def test_sort_flip():
    assert SortSpec("price", "asc").flipped() == SortSpec("price", "desc")
    assert SortSpec("price", "desc").flipped() == SortSpec("price", "asc")


def test_view_state_to_from_dict_roundtrip():
    state = ViewState(
        filters={"category": MultiSelect(("Books",)), "price": NumericRange(1, 9)},
        search_term="atlas",
        sort=SortSpec("price", "desc"),
        pagination=PaginationSpec(3, 20, total=55, total_pages=3),
        active_tab="archived",
    )

    rebuilt = ViewState.from_dict(state.to_dict())

    assert rebuilt == state
    assert rebuilt.pagination.total == 55
