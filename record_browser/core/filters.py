from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class FilterKind(str, Enum):
    MULTI_SELECT = "multi_select"
    RANGE = "range"
    FLAG = "flag"
    DATE_RANGE = "date_range"
    TEXT = "text"


# -------------------------------------------------------------------------
# Filter values (closed set of variants)
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class MultiSelect:
    """Match-any selection. Empty is equivalent to no filter."""
    values: Tuple[str, ...] = ()

    kind = FilterKind.MULTI_SELECT

    @classmethod
    def of(cls, values: Iterable[Any]) -> MultiSelect:
        return cls(tuple(str(v) for v in values))


@dataclass(frozen=True)
class NumericRange:
    """Inclusive numeric bounds; a missing bound is open-ended."""
    min: Optional[float] = None
    max: Optional[float] = None

    kind = FilterKind.RANGE


@dataclass(frozen=True)
class Flag:
    value: bool = False

    kind = FilterKind.FLAG


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO date (YYYY-MM-DD) bounds."""
    start: Optional[str] = None
    end: Optional[str] = None

    kind = FilterKind.DATE_RANGE


@dataclass(frozen=True)
class Text:
    """Single-select scalar, also used for keys nobody registered."""
    value: str = ""

    kind = FilterKind.TEXT


FilterValue = Union[MultiSelect, NumericRange, Flag, DateRange, Text]
FilterSet = Dict[str, FilterValue]


# -------------------------------------------------------------------------
# Filter definitions
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterDefinition:
    """
    Binds a filter key to a record field and a kind.

    :param key: key used in the FilterSet and in the URL
    :param kind: which FilterValue variant this key carries
    :param field: record field the predicate reads
    :param label: human-readable name for badges and panels
    :param list_field: field holds a list; MultiSelect matches on any overlap
    """
    key: str
    kind: FilterKind
    field: str
    label: str
    list_field: bool = False


class FilterRegistry:
    """
    Ordered registry of filter definitions.

    Registration order is the order the query engine applies filters in, so
    the registry is also what keeps the pipeline deterministic.
    """

    def __init__(self):
        self._definitions: Dict[str, FilterDefinition] = {}

    def register(self, definition: FilterDefinition) -> None:
        if definition.key in self._definitions:
            raise ValueError(f"Filter '{definition.key}' already registered")
        self._definitions[definition.key] = definition

    def get(self, key: str) -> Optional[FilterDefinition]:
        return self._definitions.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def definitions(self) -> List[FilterDefinition]:
        return list(self._definitions.values())

    def keys(self) -> List[str]:
        return list(self._definitions)


def default_filter_registry() -> FilterRegistry:
    """Filters for the product catalogue, in pipeline order."""
    registry = FilterRegistry()
    registry.register(FilterDefinition("status", FilterKind.MULTI_SELECT, "status", "Status"))
    registry.register(FilterDefinition("category", FilterKind.MULTI_SELECT, "category", "Category"))
    registry.register(FilterDefinition("price", FilterKind.RANGE, "price", "Price"))
    registry.register(FilterDefinition("rating", FilterKind.RANGE, "rating", "Rating"))
    registry.register(FilterDefinition("tags", FilterKind.MULTI_SELECT, "tags", "Tags", list_field=True))
    registry.register(FilterDefinition("inStock", FilterKind.FLAG, "stock", "In stock"))
    registry.register(FilterDefinition("date", FilterKind.DATE_RANGE, "dateAdded", "Date added"))
    return registry


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------

def is_empty(value: FilterValue) -> bool:
    """True when a filter value imposes no constraint and should be dropped."""
    if isinstance(value, MultiSelect):
        return len(value.values) == 0
    if isinstance(value, NumericRange):
        return value.min is None and value.max is None
    if isinstance(value, DateRange):
        return not value.start and not value.end
    if isinstance(value, (Flag, Text)):
        return False
    raise TypeError(f"Unknown filter value {value!r}")


def normalise_filters(filters: Mapping[str, FilterValue]) -> FilterSet:
    """Drop filters that are equivalent to absence (e.g. empty selections)."""
    return {key: value for key, value in filters.items() if not is_empty(value)}


def parse_number(text: Any) -> Optional[float]:
    """
    Parse user/URL input into a finite float.

    Returns None for anything non-numeric so callers can keep their previous
    value instead of raising.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        number = float(text)
    else:
        stripped = str(text).strip()
        if not stripped:
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def parse_iso_date(text: Any) -> Optional[str]:
    """Return the YYYY-MM-DD string if it's a valid calendar date, else None."""
    if not text:
        return None
    try:
        return date.fromisoformat(str(text).strip()[:10]).isoformat()
    except ValueError:
        return None


def format_number(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return repr(float(number))


def describe(value: FilterValue) -> str:
    """Short human-readable summary used by active-filter badges."""
    if isinstance(value, MultiSelect):
        return ", ".join(value.values)
    if isinstance(value, NumericRange):
        low = format_number(value.min) if value.min is not None else "…"
        high = format_number(value.max) if value.max is not None else "…"
        return f"{low} – {high}"
    if isinstance(value, Flag):
        return "yes" if value.value else "no"
    if isinstance(value, DateRange):
        return f"{value.start or '…'} → {value.end or '…'}"
    if isinstance(value, Text):
        return value.value
    raise TypeError(f"Unknown filter value {value!r}")


# -------------------------------------------------------------------------
# Serialisation for dcc.Store payloads
# -------------------------------------------------------------------------

def filter_to_dict(value: FilterValue) -> Dict[str, Any]:
    if isinstance(value, MultiSelect):
        return {"kind": value.kind.value, "values": list(value.values)}
    if isinstance(value, NumericRange):
        return {"kind": value.kind.value, "min": value.min, "max": value.max}
    if isinstance(value, Flag):
        return {"kind": value.kind.value, "value": value.value}
    if isinstance(value, DateRange):
        return {"kind": value.kind.value, "start": value.start, "end": value.end}
    if isinstance(value, Text):
        return {"kind": value.kind.value, "value": value.value}
    raise TypeError(f"Unknown filter value {value!r}")


def filter_from_dict(data: Mapping[str, Any]) -> FilterValue:
    kind = FilterKind(data.get("kind"))
    if kind is FilterKind.MULTI_SELECT:
        return MultiSelect.of(data.get("values") or [])
    if kind is FilterKind.RANGE:
        return NumericRange(parse_number(data.get("min")), parse_number(data.get("max")))
    if kind is FilterKind.FLAG:
        return Flag(bool(data.get("value", False)))
    if kind is FilterKind.DATE_RANGE:
        return DateRange(parse_iso_date(data.get("start")), parse_iso_date(data.get("end")))
    return Text(str(data.get("value", "")))
