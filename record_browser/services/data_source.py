from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from record_browser.core.collection import Collection
from record_browser.core.exceptions import DataSourceError
from record_browser.core.filters import FilterRegistry, FilterValue
from record_browser.core.query_engine import query
from record_browser.core.view_state import PaginationSpec, SortSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    data: List[Dict[str, Any]]
    pagination: PaginationSpec


class DataSource(ABC):
    """
    Abstract interface for anything that can serve a page of records
    (in-memory snapshot, HTTP API, database, ...). May be slow, may fail.
    """

    @abstractmethod
    async def fetch(
        self,
        page: int,
        page_size: int,
        filters: Mapping[str, FilterValue],
        sort_field: str,
        sort_direction: str,
        search_term: str,
    ) -> FetchResult:
        pass


class InMemoryDataSource(DataSource):
    """
    Serves pages from a Collection snapshot after a fixed artificial latency.
    """

    def __init__(
        self,
        collection: Collection,
        latency_ms: int = 300,
        registry: Optional[FilterRegistry] = None,
    ):
        self.collection = collection
        self.latency_ms = latency_ms
        self.registry = registry

    async def fetch(
        self,
        page: int,
        page_size: int,
        filters: Mapping[str, FilterValue],
        sort_field: str,
        sort_direction: str,
        search_term: str,
    ) -> FetchResult:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

        try:
            result = query(
                self.collection,
                filters,
                search_term,
                SortSpec(field=sort_field, direction=sort_direction),
                page,
                page_size,
                registry=self.registry,
            )
        except Exception as e:
            raise DataSourceError(f"Query over '{self.collection.name}' failed: {e}") from e

        return FetchResult(
            data=result.items,
            pagination=PaginationSpec(
                page=page,
                page_size=page_size,
                total=result.total,
                total_pages=result.total_pages,
            ),
        )
