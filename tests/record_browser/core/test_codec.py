from urllib.parse import parse_qsl

import pytest

from record_browser.core.codec import ViewStateCodec, decode, encode
from record_browser.core.filters import DateRange, Flag, MultiSelect, NumericRange, Text
from record_browser.core.view_state import PaginationSpec, SortSpec, ViewState


def test_roundtrip_without_filters():
    state = ViewState()
    assert decode(encode(state)) == state


def test_roundtrip_with_scalar_filter():
    state = ViewState(filters={"inStock": Flag(True), "brand": Text("Acme")})
    assert decode(encode(state)) == state


def test_roundtrip_with_three_value_array():
    state = ViewState(filters={"category": MultiSelect(("Books", "Home", "Sports"))})
    encoded = encode(state)

    assert parse_qsl(encoded).count(("category[]", "Home")) == 1
    assert decode(encoded) == state


def test_roundtrip_with_non_default_reserved_keys():
    state = ViewState(
        filters={
            "price": NumericRange(10, 99.5),
            "date": DateRange("2024-01-01", "2024-06-30"),
        },
        search_term="red shoes",
        sort=SortSpec("price", "desc"),
        pagination=PaginationSpec(4, 50),
        active_tab="archived",
    )
    assert decode(encode(state)) == state


def test_encoded_keys_follow_url_conventions():
    state = ViewState(
        filters={"price": NumericRange(min=5), "date": DateRange(end="2024-02-01")},
        search_term="lamp",
    )
    pairs = dict(parse_qsl(encode(state)))

    assert pairs["page"] == "1"
    assert pairs["pageSize"] == "10"
    assert pairs["sort"] == "name"
    assert pairs["order"] == "asc"
    assert pairs["q"] == "lamp"
    assert pairs["tab"] == "all"
    assert pairs["priceMin"] == "5"
    assert "priceMax" not in pairs
    assert pairs["dateTo"] == "2024-02-01"


def test_missing_keys_fall_back_to_defaults():
    assert decode("") == ViewState()
    assert decode(None) == ViewState()
    assert decode("?") == ViewState()


@pytest.mark.parametrize(
    "query_string",
    [
        "page=abc&pageSize=7&order=sideways&tab=bogus",
        "page=-3&pageSize=0",
        "priceMin=cheap&priceMax=&dateFrom=notadate",
        "inStock=maybe",
        "%%%&&==&[]=x",
        "page=1e9999",
    ],
)
def test_malformed_input_never_raises(query_string):
    state = decode(query_string)

    assert state.pagination.page >= 1
    assert state.pagination.page_size in (10, 20, 50, 100)
    assert state.sort.direction in ("asc", "desc")
    assert state.active_tab in ("all", "active", "archived", "draft")


def test_malformed_reserved_values_use_defaults():
    state = decode("page=abc&pageSize=7&order=sideways&tab=bogus")
    assert state == ViewState()


def test_invalid_bounds_are_dropped():
    state = decode("priceMin=cheap&priceMax=20&inStock=maybe")
    assert state.filters == {"price": NumericRange(max=20)}


def test_unknown_keys_pass_through():
    state = decode("colour=red&sizes[]=S&sizes[]=M&page=2")

    assert state.filters == {
        "colour": Text("red"),
        "sizes": MultiSelect(("S", "M")),
    }
    assert state.pagination.page == 2
    assert decode(encode(state)) == state


def test_registered_multi_select_accepts_scalar_form():
    assert decode("category=Books").filters == {"category": MultiSelect(("Books",))}


def test_codec_with_custom_registry():
    from record_browser.core.filters import FilterDefinition, FilterKind, FilterRegistry

    registry = FilterRegistry()
    registry.register(FilterDefinition("weight", FilterKind.RANGE, "weight", "Weight"))
    codec = ViewStateCodec(registry)

    state = codec.decode("weightMin=1&weightMax=2&priceMin=3")

    assert state.filters["weight"] == NumericRange(1, 2)
    # "price" isn't registered here, so its bound key is an opaque text filter
    assert state.filters["priceMin"] == Text("3")
