from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from record_browser.core.collection import DEFAULT_SEARCH_FIELDS
from record_browser.core.exceptions import ConfigError

DEFAULT_LATENCY_MS = 300


@dataclass
class CollectionConfig:
    """
    Parsed config entry for the record collection.
    """
    raw: Dict[str, Any]
    source_path: Path

    @property
    def name(self) -> str:
        return self.raw.get("name", "Records")

    @property
    def file(self) -> Path:
        try:
            return Path(self.raw["file"])
        except KeyError:
            raise ConfigError(f"Collection config in {self.source_path} has no 'file'")

    @property
    def id_field(self) -> str:
        return self.raw.get("id_field", "id")

    @property
    def search_fields(self) -> List[str]:
        return list(self.raw.get("search_fields", DEFAULT_SEARCH_FIELDS))

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path) -> CollectionConfig:
        if not isinstance(raw, dict):
            raise ConfigError(f"'collection' in {source_path} must be an object")
        return cls(raw=raw, source_path=source_path)


@dataclass
class GlobalConfig:
    ui_title: str = "Record Browser"
    subtitle: str = "Filter, search and page through records"
    collection: Optional[CollectionConfig] = None
    data_root: Optional[Path] = None
    latency_ms: int = DEFAULT_LATENCY_MS
    page_title: str = "Products"
    page_description: str = "Manage your product inventory"
    extra: Dict[str, Any] = field(default_factory=dict)

    def resolve_collection_path(self) -> Path:
        if self.collection is None:
            raise ConfigError("No collection configured")
        path = self.collection.file
        if path.is_absolute() or self.data_root is None:
            return path
        return self.data_root / path
