from .data_source import DataSource, FetchResult, InMemoryDataSource
from .view_state_store import Notification, ViewStateStore

__all__ = ["DataSource", "FetchResult", "InMemoryDataSource", "Notification", "ViewStateStore"]
