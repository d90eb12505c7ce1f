from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from record_browser.core.exceptions import CollectionSchemaError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_FIELDS = ("name", "description", "category")


@dataclass(frozen=True)
class ValidSets:
    """
    Cached distinct values for filter options.
    Computing .unique() on large Series can be expensive, so we do it once per Collection.
    """
    statuses: List[str]
    categories: List[str]
    tags: List[str]


class Collection:
    """
    In-memory snapshot of the records being browsed.

    Includes:
    - the records as a pandas DataFrame (one row per record, original order kept)
    - validation of the id column (present, unique)
    - cached distinct values for filter dropdowns
    - lookup of full records by id (for materialising selections)
    """

    def __init__(
        self,
        name: str,
        frame: pd.DataFrame,
        id_field: str = "id",
        search_fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
        source_path: Optional[Path] = None,
    ) -> None:
        if id_field not in frame.columns:
            raise CollectionSchemaError(f"Collection '{name}' has no id field '{id_field}'")

        duplicated = frame[id_field][frame[id_field].duplicated()]
        if not duplicated.empty:
            raise CollectionSchemaError(
                f"Collection '{name}' has duplicate ids: {sorted(map(str, duplicated.unique()))[:5]}"
            )

        self.name = name
        self.frame = frame.reset_index(drop=True)
        self.id_field = id_field
        self.search_fields = tuple(f for f in search_fields if f in self.frame.columns)
        self.source_path = source_path

        self._valid_sets: Optional[ValidSets] = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------
    @classmethod
    def from_records(
        cls,
        name: str,
        records: Iterable[Dict[str, Any]],
        id_field: str = "id",
        search_fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    ) -> Collection:
        return cls(name, pd.DataFrame.from_records(list(records)), id_field, search_fields)

    @classmethod
    def from_json_file(
        cls,
        name: str,
        path: Path,
        id_field: str = "id",
        search_fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    ) -> Collection:
        path = Path(path)
        logger.info("Loading collection", extra={"collection": name, "path": str(path)})
        with path.open() as f:
            raw = json.load(f)

        records = raw.get("records", []) if isinstance(raw, dict) else raw
        if not isinstance(records, list):
            raise CollectionSchemaError(f"Expected a list of records in {path}")

        frame = pd.DataFrame.from_records(records)
        return cls(name, frame, id_field, search_fields, source_path=path)

    # -------------------------------------------------------------------------
    # Basic info
    # -------------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.frame)

    @property
    def identity(self) -> str:
        """Changes whenever a different dataset is loaded; used to reset table state."""
        return f"{self.name}:{len(self.frame)}"

    # -------------------------------------------------------------------------
    # Cached valid values for filter options
    # -------------------------------------------------------------------------
    def valid_sets(self) -> ValidSets:
        if self._valid_sets is not None:
            return self._valid_sets

        def distinct(column: str) -> List[str]:
            if column not in self.frame.columns:
                return []
            return sorted(self.frame[column].dropna().astype(str).unique())

        tags: set[str] = set()
        if "tags" in self.frame.columns:
            for value in self.frame["tags"].dropna():
                if isinstance(value, (list, tuple)):
                    tags.update(map(str, value))

        self._valid_sets = ValidSets(
            statuses=distinct("status"),
            categories=distinct("category"),
            tags=sorted(tags),
        )
        return self._valid_sets

    # -------------------------------------------------------------------------
    # Record lookup
    # -------------------------------------------------------------------------
    def records_by_id(self, ids: Iterable[Any]) -> List[Dict[str, Any]]:
        wanted = list(ids)
        if not wanted:
            return []
        mask = self.frame[self.id_field].isin(wanted)
        return self.frame[mask].to_dict("records")
