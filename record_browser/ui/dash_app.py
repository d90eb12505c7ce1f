from __future__ import annotations

import logging
from pathlib import Path

import dash_bootstrap_components as dbc
from dash import Dash

from .config import AppConfig
from record_browser.config.loader import load_collection, load_global_config
from record_browser.core.codec import ViewStateCodec
from record_browser.core.filters import default_filter_registry
from record_browser.services.data_source import InMemoryDataSource
from record_browser.ui.callbacks.callbacks_table import register_table_callbacks
from record_browser.ui.callbacks.callbacks_view import register_view_callbacks
from record_browser.ui.columns import product_columns, render_product_card
from record_browser.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)


def create_dash_app(config_root: Path | str = Path("config")) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config + records
    global_config = load_global_config(config_root)
    collection = load_collection(global_config)

    # 2) Query services
    registry = default_filter_registry()
    codec = ViewStateCodec(registry)
    source = InMemoryDataSource(collection, latency_ms=global_config.latency_ms, registry=registry)

    # 3) App Context
    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        collection=collection,
        registry=registry,
        codec=codec,
        source=source,
        columns=product_columns(),
        render_item=render_product_card,
    )
    ctx.validate()

    assets_path = Path(__file__).parent / "assets"

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(assets_path),
        # table checkboxes and pagination links are rendered by callbacks
        suppress_callback_exceptions=True,
    )

    app.title = getattr(global_config, "ui_title", "Record Browser")

    app.layout = build_layout(ctx)

    # Register callbacks
    register_view_callbacks(app, ctx)
    register_table_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"collection": collection.name, "n_records": len(collection)},
    )
    return app
