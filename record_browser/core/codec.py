from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

from record_browser.core.filters import (
    DateRange,
    FilterKind,
    FilterRegistry,
    FilterValue,
    Flag,
    MultiSelect,
    NumericRange,
    Text,
    default_filter_registry,
    format_number,
    parse_iso_date,
    parse_number,
)
from record_browser.core.view_state import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    DEFAULT_TAB,
    PAGE_SIZE_OPTIONS,
    SORT_DIRECTIONS,
    TABS,
    PaginationSpec,
    SortSpec,
    ViewState,
)

logger = logging.getLogger(__name__)

KEY_PAGE = "page"
KEY_PAGE_SIZE = "pageSize"
KEY_SORT = "sort"
KEY_ORDER = "order"
KEY_SEARCH = "q"
KEY_TAB = "tab"

RESERVED_KEYS = frozenset({KEY_PAGE, KEY_PAGE_SIZE, KEY_SORT, KEY_ORDER, KEY_SEARCH, KEY_TAB})

# Multi-valued filters are written as repeated "key[]=value" pairs
ARRAY_SUFFIX = "[]"

RANGE_SUFFIXES = ("Min", "Max")
DATE_SUFFIXES = ("From", "To")

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


class ViewStateCodec:
    """
    Bidirectional mapping between a ViewState and a flat URL query string.

    Conventions (identical on both sides, so decode(encode(s)) == s):
    - MultiSelect  -> repeated  key[]=v
    - NumericRange -> keyMin=…  keyMax=…
    - DateRange    -> keyFrom=… keyTo=…
    - Flag         -> key=true|false
    - Text         -> key=v

    Range/date/flag keys are resolved through the FilterRegistry; anything
    else is passed through as a Text (or MultiSelect, with the [] suffix)
    filter. decode() never raises.
    """

    def __init__(self, registry: Optional[FilterRegistry] = None):
        self.registry = registry or default_filter_registry()

        # "priceMin" -> ("price", "min"), "dateFrom" -> ("date", "start"), ...
        self._bound_keys: Dict[str, Tuple[str, str]] = {}
        for definition in self.registry.definitions():
            if definition.kind is FilterKind.RANGE:
                self._bound_keys[definition.key + RANGE_SUFFIXES[0]] = (definition.key, "min")
                self._bound_keys[definition.key + RANGE_SUFFIXES[1]] = (definition.key, "max")
            elif definition.kind is FilterKind.DATE_RANGE:
                self._bound_keys[definition.key + DATE_SUFFIXES[0]] = (definition.key, "start")
                self._bound_keys[definition.key + DATE_SUFFIXES[1]] = (definition.key, "end")

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------
    def encode(self, state: ViewState) -> str:
        pairs: List[Tuple[str, str]] = [
            (KEY_PAGE, str(state.pagination.page)),
            (KEY_PAGE_SIZE, str(state.pagination.page_size)),
            (KEY_SORT, state.sort.field),
            (KEY_ORDER, state.sort.direction),
        ]

        if state.search_term:
            pairs.append((KEY_SEARCH, state.search_term))

        for key, value in state.filters.items():
            pairs.extend(self._encode_filter(key, value))

        pairs.append((KEY_TAB, state.active_tab))
        return urlencode(pairs)

    @staticmethod
    def _encode_filter(key: str, value: FilterValue) -> List[Tuple[str, str]]:
        if isinstance(value, MultiSelect):
            return [(key + ARRAY_SUFFIX, v) for v in value.values]
        if isinstance(value, NumericRange):
            pairs = []
            if value.min is not None:
                pairs.append((key + RANGE_SUFFIXES[0], format_number(value.min)))
            if value.max is not None:
                pairs.append((key + RANGE_SUFFIXES[1], format_number(value.max)))
            return pairs
        if isinstance(value, DateRange):
            pairs = []
            if value.start:
                pairs.append((key + DATE_SUFFIXES[0], value.start))
            if value.end:
                pairs.append((key + DATE_SUFFIXES[1], value.end))
            return pairs
        if isinstance(value, Flag):
            return [(key, "true" if value.value else "false")]
        if isinstance(value, Text):
            return [(key, value.value)]
        raise TypeError(f"Unknown filter value {value!r}")

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------
    def decode(self, query_string: Optional[str]) -> ViewState:
        if not isinstance(query_string, str):
            query_string = ""
        pairs = parse_qsl(query_string.lstrip("?"), keep_blank_values=True)

        reserved: Dict[str, str] = {}
        multi: Dict[str, List[str]] = {}
        bounds: Dict[str, Dict[str, str]] = {}
        scalars: Dict[str, str] = {}

        for key, value in pairs:
            if key in RESERVED_KEYS:
                reserved[key] = value
            elif key.endswith(ARRAY_SUFFIX) and len(key) > len(ARRAY_SUFFIX):
                multi.setdefault(key[: -len(ARRAY_SUFFIX)], []).append(value)
            elif key in self._bound_keys:
                filter_key, bound = self._bound_keys[key]
                bounds.setdefault(filter_key, {})[bound] = value
            elif key:
                scalars[key] = value

        filters: Dict[str, FilterValue] = {}

        for key, values in multi.items():
            filters[key] = MultiSelect(tuple(values))

        for key, raw in bounds.items():
            definition = self.registry.get(key)
            if definition.kind is FilterKind.RANGE:
                filters[key] = NumericRange(parse_number(raw.get("min")), parse_number(raw.get("max")))
            else:
                filters[key] = DateRange(parse_iso_date(raw.get("start")), parse_iso_date(raw.get("end")))

        for key, value in scalars.items():
            if key in filters:
                continue
            decoded = self._decode_scalar(key, value)
            if decoded is not None:
                filters[key] = decoded

        return ViewState(
            filters=filters,
            search_term=reserved.get(KEY_SEARCH, ""),
            sort=SortSpec(
                field=reserved.get(KEY_SORT) or DEFAULT_SORT_FIELD,
                direction=_choice(reserved.get(KEY_ORDER), SORT_DIRECTIONS, DEFAULT_SORT_DIRECTION),
            ),
            pagination=PaginationSpec(
                page=_positive_int(reserved.get(KEY_PAGE), DEFAULT_PAGE),
                page_size=_page_size(reserved.get(KEY_PAGE_SIZE)),
            ),
            active_tab=_choice(reserved.get(KEY_TAB), TABS, DEFAULT_TAB),
        )

    def _decode_scalar(self, key: str, value: str) -> Optional[FilterValue]:
        definition = self.registry.get(key)
        if definition is None or definition.kind is FilterKind.TEXT:
            return Text(value)

        if definition.kind is FilterKind.MULTI_SELECT:
            return MultiSelect((value,))

        if definition.kind is FilterKind.FLAG:
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return Flag(True)
            if lowered in _FALSE_VALUES:
                return Flag(False)

        logger.debug("Dropping unparsable URL filter", extra={"key": key, "value": value})
        return None


# -------------------------------------------------------------------------
# Reserved-key parsing helpers (never raise)
# -------------------------------------------------------------------------
def _positive_int(raw: Optional[str], default: int) -> int:
    try:
        number = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _page_size(raw: Optional[str]) -> int:
    size = _positive_int(raw, DEFAULT_PAGE_SIZE)
    return size if size in PAGE_SIZE_OPTIONS else DEFAULT_PAGE_SIZE


def _choice(raw: Optional[str], allowed, default: str) -> str:
    return raw if raw in allowed else default


_default_codec: Optional[ViewStateCodec] = None


def _codec() -> ViewStateCodec:
    global _default_codec
    if _default_codec is None:
        _default_codec = ViewStateCodec()
    return _default_codec


def encode(state: ViewState) -> str:
    return _codec().encode(state)


def decode(query_string: Optional[str]) -> ViewState:
    return _codec().decode(query_string)
