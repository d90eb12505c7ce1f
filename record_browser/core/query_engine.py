from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from record_browser.core.collection import Collection
from record_browser.core.filters import (
    DateRange,
    FilterDefinition,
    FilterRegistry,
    FilterValue,
    Flag,
    MultiSelect,
    NumericRange,
    Text,
    default_filter_registry,
)
from record_browser.core.view_state import SortSpec, total_pages_for

logger = logging.getLogger(__name__)

DEFAULT_FILTERS = default_filter_registry()


@dataclass(frozen=True)
class QueryResult:
    items: List[Dict[str, Any]]
    total: int
    total_pages: int


def query(
    collection: Collection,
    filters: Mapping[str, FilterValue],
    search_term: str,
    sort: SortSpec,
    page: int,
    page_size: int,
    registry: Optional[FilterRegistry] = None,
) -> QueryResult:
    """
    Run the full pipeline: search -> filters -> sort -> paginate.

    Pure: the collection is never mutated and nothing is cached.

    Precondition: numeric filter bounds are already numbers. A page past the
    last page yields an empty slice; clamping is the caller's job.
    """
    registry = registry or DEFAULT_FILTERS

    frame = apply_search(collection.frame, search_term, collection.search_fields)
    frame = apply_filters(frame, filters, registry)
    frame = apply_sort(frame, sort)

    total = len(frame)
    total_pages = total_pages_for(total, page_size)

    start = (page - 1) * page_size
    if start < 0 or start >= total:
        page_frame = frame.iloc[0:0]
    else:
        page_frame = frame.iloc[start:min(start + page_size, total)]

    logger.debug(
        "query_done",
        extra={
            "collection": collection.name,
            "n_filters": len(filters),
            "total": total,
            "page": page,
            "page_size": page_size,
        },
    )

    return QueryResult(
        items=page_frame.to_dict("records"),
        total=total,
        total_pages=total_pages,
    )


# -------------------------------------------------------------------------
# Stage 1: search
# -------------------------------------------------------------------------
def apply_search(frame: pd.DataFrame, search_term: str, fields) -> pd.DataFrame:
    term = (search_term or "").strip().lower()
    if not term or frame.empty:
        return frame

    mask = pd.Series(False, index=frame.index)
    for name in fields:
        if name not in frame.columns:
            continue
        text = frame[name].fillna("").astype(str).str.lower()
        mask |= text.str.contains(term, regex=False)
    return frame[mask]


# -------------------------------------------------------------------------
# Stage 2: filters, in registry order
# -------------------------------------------------------------------------
def apply_filters(
    frame: pd.DataFrame,
    filters: Mapping[str, FilterValue],
    registry: FilterRegistry,
) -> pd.DataFrame:
    for definition in registry.definitions():
        value = filters.get(definition.key)
        if value is None or frame.empty:
            continue
        if definition.field not in frame.columns:
            logger.warning(
                "Filter field missing from collection",
                extra={"filter": definition.key, "field": definition.field},
            )
            continue
        mask = filter_mask(frame[definition.field], definition, value)
        if mask is not None:
            frame = frame[mask]

    unknown = [key for key in filters if key not in registry]
    if unknown:
        logger.debug("Ignoring unregistered filters", extra={"filters": unknown})
    return frame


def filter_mask(
    series: pd.Series,
    definition: FilterDefinition,
    value: FilterValue,
) -> Optional[pd.Series]:
    """
    Boolean mask for one filter, or None when the value imposes no constraint
    (or doesn't match the kind the definition expects).
    """
    if value.kind is not definition.kind:
        logger.warning(
            "Filter value kind mismatch",
            extra={"filter": definition.key, "expected": definition.kind.value, "got": value.kind.value},
        )
        return None

    if isinstance(value, MultiSelect):
        if not value.values:
            return None
        wanted = set(value.values)
        if definition.list_field:
            return series.map(
                lambda cell: isinstance(cell, (list, tuple)) and any(str(v) in wanted for v in cell)
            ).astype(bool)
        return series.astype(str).isin(wanted)

    if isinstance(value, NumericRange):
        low = value.min if value.min is not None else 0.0
        high = value.max if value.max is not None else np.inf
        numbers = pd.to_numeric(series, errors="coerce")
        return (numbers >= low) & (numbers <= high)

    if isinstance(value, Flag):
        if not value.value:
            return None
        return pd.to_numeric(series, errors="coerce") > 0

    if isinstance(value, DateRange):
        # mixed date-only / date-time / "Z" values all parse; unparsable cells become NaT
        dates = pd.to_datetime(series, errors="coerce", format="ISO8601", utc=True)
        start = pd.Timestamp(value.start, tz="UTC") if value.start else pd.Timestamp(0, tz="UTC")
        if value.end:
            # the end date is inclusive: anything before the following midnight matches
            return (dates >= start) & (dates < pd.Timestamp(value.end, tz="UTC") + pd.Timedelta(days=1))
        return (dates >= start) & (dates <= pd.Timestamp.now(tz="UTC"))

    if isinstance(value, Text):
        return series.astype(str) == value.value

    raise TypeError(f"Unknown filter value {value!r}")


# -------------------------------------------------------------------------
# Stage 3: stable sort
# -------------------------------------------------------------------------
def _sort_key(series: pd.Series) -> pd.Series:
    if is_bool_dtype(series) or is_numeric_dtype(series):
        return series
    return series.map(lambda v: v.casefold() if isinstance(v, str) else v)


def apply_sort(frame: pd.DataFrame, sort: SortSpec) -> pd.DataFrame:
    if sort is None or not sort.field or frame.empty:
        return frame
    if sort.field not in frame.columns:
        logger.debug("Unknown sort field, keeping order", extra={"sort_field": sort.field})
        return frame

    try:
        # kind="stable" keeps ties in prior order for both directions
        return frame.sort_values(
            by=sort.field,
            ascending=not sort.descending,
            kind="stable",
            na_position="last",
            key=_sort_key,
        )
    except TypeError:
        logger.warning("Unsortable field, keeping order", extra={"sort_field": sort.field})
        return frame
