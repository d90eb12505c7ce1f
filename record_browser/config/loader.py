from __future__ import annotations

import json
import logging
from pathlib import Path

from record_browser.config.model import DEFAULT_LATENCY_MS, CollectionConfig, GlobalConfig
from record_browser.core.collection import Collection
from record_browser.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

KNOWN_KEYS = {"ui_title", "subtitle", "collection", "data_root", "latency_ms", "page_title", "page_description"}


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a config directory (expects global.json).
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    try:
        with global_path.open() as f:
            raw_global = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {global_path}: {e}") from e

    if not isinstance(raw_global, dict):
        raise ConfigError(f"{global_path} must contain a JSON object")

    # Resolve data_root properly:
    data_root_raw = raw_global.get("data_root")
    if data_root_raw is None:
        data_root = root
    else:
        data_root_path = Path(data_root_raw)
        if data_root_path.is_absolute():
            data_root = data_root_path
        else:
            data_root = (root / data_root_path).resolve()

    raw_collection = raw_global.get("collection")
    collection = (
        CollectionConfig.from_raw(raw_collection, source_path=global_path)
        if raw_collection is not None
        else None
    )
    if collection is None:
        logger.warning(f"No collection configured in {global_path}")

    latency_raw = raw_global.get("latency_ms", DEFAULT_LATENCY_MS)
    try:
        latency_ms = max(0, int(latency_raw))
    except (TypeError, ValueError):
        raise ConfigError(f"latency_ms must be an integer, got {latency_raw!r}")

    defaults = GlobalConfig()
    return GlobalConfig(
        ui_title=raw_global.get("ui_title", defaults.ui_title),
        subtitle=raw_global.get("subtitle", defaults.subtitle),
        collection=collection,
        data_root=data_root,
        latency_ms=latency_ms,
        page_title=raw_global.get("page_title", defaults.page_title),
        page_description=raw_global.get("page_description", defaults.page_description),
        extra={k: v for k, v in raw_global.items() if k not in KNOWN_KEYS},
    )


def load_collection(global_config: GlobalConfig) -> Collection:
    """
    Materialise the configured collection from its JSON records file.
    """
    cfg = global_config.collection
    if cfg is None:
        raise ConfigError("No collection configured")

    path = global_config.resolve_collection_path()
    if not path.is_file():
        raise ConfigError(f"Collection file not found: {path}")

    collection = Collection.from_json_file(
        cfg.name,
        path,
        id_field=cfg.id_field,
        search_fields=cfg.search_fields,
    )
    logger.info(
        "Collection loaded",
        extra={"collection": collection.name, "n_records": len(collection), "path": str(path)},
    )
    return collection
