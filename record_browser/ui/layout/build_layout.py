from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from record_browser.ui.ids import IDs
from record_browser.ui.layout.build_filter_panel import build_filter_panel
from record_browser.ui.layout.build_navbar import build_navbar
from record_browser.ui.layout.build_results_panel import build_results_panel

if TYPE_CHECKING:
    from record_browser.ui.config import AppConfig


def build_layout(ctx: "AppConfig"):
    navbar = build_navbar(ctx.global_config)

    if ctx.collection is None:
        filter_panel = dbc.Card(
            dbc.CardBody("No collection configured. Add one to config/global.json."),
            className="rb-sidebar",
        )
    else:
        filter_panel = build_filter_panel(ctx.collection)

    return dbc.Container(
        fluid=True,
        className="rb-root",
        children=[
            navbar,

            # URL is the persisted view state; table state is per page load
            dcc.Location(id=IDs.Control.URL, refresh=False),
            dcc.Store(id=IDs.Store.PAGE_DATA, storage_type="memory"),
            dcc.Store(id=IDs.Store.TABLE_STATE, storage_type="memory"),

            dbc.Toast(
                id=IDs.Control.ERROR_TOAST,
                header="Error",
                icon="danger",
                is_open=False,
                dismissable=True,
                duration=5000,
                style={"position": "fixed", "top": 16, "right": 16, "zIndex": 1080, "width": 350},
            ),

            html.Div(
                [
                    html.H3(ctx.global_config.page_title, className="mb-0"),
                    html.P(ctx.global_config.page_description, className="text-muted"),
                ],
                className="mt-3",
            ),

            dbc.Row(
                [
                    dbc.Col(filter_panel, lg=3, className="mt-2"),
                    dbc.Col(build_results_panel(), lg=9, className="mt-2"),
                ],
                className="gx-4",
            ),
        ],
    )
