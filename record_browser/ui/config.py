from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from record_browser.config.model import GlobalConfig
from record_browser.core.codec import ViewStateCodec
from record_browser.core.collection import Collection
from record_browser.core.columns import ColumnDef
from record_browser.core.filters import FilterRegistry
from record_browser.services.data_source import DataSource


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    collection: Optional[Collection] = None
    registry: Optional[FilterRegistry] = None
    codec: Optional[ViewStateCodec] = None
    source: Optional[DataSource] = None
    columns: List[ColumnDef] = field(default_factory=list)
    render_item: Optional[Callable[[dict], Any]] = None

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.collection is None:
            raise RuntimeError("AppConfig.collection must be initialized.")
        if self.source is None:
            raise RuntimeError("AppConfig.source must be initialized.")
        if self.codec is None:
            raise RuntimeError("AppConfig.codec must be initialized.")
        if not self.columns:
            raise RuntimeError("AppConfig.columns must not be empty.")
