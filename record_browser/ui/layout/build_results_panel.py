from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from record_browser.core.view_state import PAGE_SIZE_OPTIONS, TABS
from record_browser.ui.ids import IDs

TAB_LABELS = {"all": "All Products", "active": "Active", "archived": "Archived", "draft": "Draft"}


def build_results_panel() -> html.Div:
    return html.Div(
        [
            dbc.Tabs(
                [dbc.Tab(label=TAB_LABELS.get(tab, tab.capitalize()), tab_id=tab) for tab in TABS],
                id=IDs.Control.STATUS_TABS,
                active_tab="all",
                className="mb-3",
            ),
            html.Div(id=IDs.Control.ACTIVE_FILTERS),
            html.Div(
                [
                    dbc.RadioItems(
                        id=IDs.Control.VIEW_MODE,
                        options=[
                            {"label": "List", "value": "table"},
                            {"label": "Grid", "value": "grid"},
                        ],
                        value="table",
                        inline=True,
                        className="btn-group",
                        inputClassName="btn-check",
                        labelClassName="btn btn-outline-primary btn-sm",
                        labelCheckedClassName="active",
                    ),
                ],
                className="mb-3",
            ),
            html.Div(
                [
                    html.Span(id=IDs.Control.SELECTION_TEXT, className="small fw-medium"),
                    dbc.Button("Clear", id=IDs.Control.CLEAR_SELECTION_BTN, size="sm", color="link"),
                    dbc.Button(
                        "Export (CSV)",
                        id=IDs.Control.EXPORT_SELECTION_BTN,
                        size="sm",
                        color="secondary",
                        outline=True,
                        className="ms-auto",
                    ),
                    dcc.Download(id=IDs.Control.DOWNLOAD_SELECTION),
                ],
                id=IDs.Control.SELECTION_BAR,
                className="d-flex align-items-center gap-2 px-3 py-2 mb-2 bg-light rounded",
                style={"display": "none"},
            ),
            dcc.Loading(
                id="results-loading",
                type="default",
                children=[
                    html.Div(id=IDs.Control.TABLE_CONTAINER),
                    html.Div(id=IDs.Control.GRID_CONTAINER, style={"display": "none"}),
                ],
            ),
            html.Div(
                [
                    html.Div(id=IDs.Control.PAGINATION_SUMMARY, className="small text-muted"),
                    html.Div(
                        [
                            html.Span("Rows per page", className="small me-2"),
                            dbc.Select(
                                id=IDs.Control.PAGE_SIZE_SELECT,
                                options=[{"label": str(n), "value": str(n)} for n in PAGE_SIZE_OPTIONS],
                                value=str(PAGE_SIZE_OPTIONS[0]),
                                size="sm",
                                style={"width": "5rem"},
                            ),
                        ],
                        className="d-flex align-items-center",
                    ),
                    html.Div(id=IDs.Control.PAGINATION_LINKS),
                ],
                className="d-flex flex-wrap justify-content-between align-items-center gap-3 mt-3",
            ),
        ]
    )
