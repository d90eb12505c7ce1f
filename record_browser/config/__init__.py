from .loader import load_collection, load_global_config
from .model import CollectionConfig, GlobalConfig

__all__ = ["load_collection", "load_global_config", "CollectionConfig", "GlobalConfig"]
