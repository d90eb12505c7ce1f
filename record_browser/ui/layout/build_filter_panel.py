from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from record_browser.core.collection import Collection
from record_browser.ui.events import RATING_ANY
from record_browser.ui.ids import IDs


def build_filter_panel(collection: Collection) -> dbc.Card:
    valid = collection.valid_sets()

    status_options = [{"label": "All", "value": "all"}] + [
        {"label": s.capitalize(), "value": s} for s in valid.statuses
    ]

    return dbc.Card(
        [
            dbc.CardHeader("Filters", className="fw-semibold"),
            dbc.CardBody(
                [
                    # Search
                    html.Div(
                        [
                            dbc.InputGroup(
                                [
                                    dbc.Input(
                                        id=IDs.Control.SEARCH_INPUT,
                                        type="search",
                                        placeholder="Search products...",
                                        debounce=True,
                                    ),
                                    dbc.Button("×", id=IDs.Control.SEARCH_CLEAR_BTN, color="light"),
                                ],
                                size="sm",
                            ),
                        ],
                        className="mb-3",
                    ),
                    dbc.Button(
                        "Clear all filters",
                        id=IDs.Control.CLEAR_FILTERS_BTN,
                        color="link",
                        size="sm",
                        className="p-0 mb-3",
                    ),
                    dbc.Accordion(
                        [
                            dbc.AccordionItem(
                                dbc.RadioItems(
                                    id=IDs.Control.STATUS_RADIO,
                                    options=status_options,
                                    value="all",
                                ),
                                title="Status",
                            ),
                            dbc.AccordionItem(
                                dbc.Checklist(
                                    id=IDs.Control.CATEGORY_CHECKLIST,
                                    options=[{"label": c, "value": c} for c in valid.categories],
                                    value=[],
                                ),
                                title="Category",
                            ),
                            dbc.AccordionItem(
                                dbc.Row(
                                    [
                                        dbc.Col(
                                            [
                                                dbc.Label("Min", html_for=IDs.Control.PRICE_MIN, size="sm"),
                                                # type=text so invalid input reaches the store and is ignored there
                                                dbc.Input(
                                                    id=IDs.Control.PRICE_MIN,
                                                    type="text",
                                                    inputmode="decimal",
                                                    placeholder="0",
                                                    debounce=True,
                                                    size="sm",
                                                ),
                                            ]
                                        ),
                                        dbc.Col(
                                            [
                                                dbc.Label("Max", html_for=IDs.Control.PRICE_MAX, size="sm"),
                                                dbc.Input(
                                                    id=IDs.Control.PRICE_MAX,
                                                    type="text",
                                                    inputmode="decimal",
                                                    placeholder="500",
                                                    debounce=True,
                                                    size="sm",
                                                ),
                                            ]
                                        ),
                                    ]
                                ),
                                title="Price range",
                            ),
                            dbc.AccordionItem(
                                dbc.RadioItems(
                                    id=IDs.Control.RATING_SELECT,
                                    options=[{"label": "Any", "value": RATING_ANY}]
                                    + [{"label": f"{r}+ stars", "value": str(r)} for r in (4, 3, 2, 1)],
                                    value=RATING_ANY,
                                ),
                                title="Rating",
                            ),
                            dbc.AccordionItem(
                                dbc.Checklist(
                                    id=IDs.Control.TAG_CHECKLIST,
                                    options=[{"label": t, "value": t} for t in valid.tags],
                                    value=[],
                                ),
                                title="Tags",
                            ),
                            dbc.AccordionItem(
                                [
                                    dbc.Switch(
                                        id=IDs.Control.IN_STOCK_SWITCH,
                                        label="In stock only",
                                        value=False,
                                        className="mb-3",
                                    ),
                                    dbc.Label("Added from", size="sm"),
                                    dcc.DatePickerSingle(
                                        id=IDs.Control.DATE_FROM,
                                        display_format="YYYY-MM-DD",
                                        clearable=True,
                                        className="mb-2 d-block",
                                    ),
                                    dbc.Label("Added to", size="sm"),
                                    dcc.DatePickerSingle(
                                        id=IDs.Control.DATE_TO,
                                        display_format="YYYY-MM-DD",
                                        clearable=True,
                                        className="d-block",
                                    ),
                                ],
                                title="Availability",
                            ),
                        ],
                        always_open=True,
                        start_collapsed=False,
                        flush=True,
                    ),
                ]
            ),
        ],
        className="rb-sidebar",
    )
