from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional, Sequence

import dash_bootstrap_components as dbc
from dash import html

from record_browser.core.filters import FilterRegistry, describe
from record_browser.core.pagination import ELLIPSIS, page_window
from record_browser.core.table_controller import TableController
from record_browser.core.view_state import PaginationSpec, SortSpec, ViewState
from record_browser.ui.ids import (
    CLEAR_ALL_INDEX,
    IDs,
    filter_remove_id,
    page_link_id,
    row_select_id,
    sort_header_id,
)

SORT_ARROWS = {"asc": " ▲", "desc": " ▼"}


# -----------------------------------------------------------------------------
# Table mode
# -----------------------------------------------------------------------------
def render_table(controller: TableController, sort: SortSpec) -> html.Div:
    header_cells = [
        html.Th(
            dbc.Checkbox(
                id=IDs.Control.SELECT_ALL,
                value=controller.all_selected,
                className="rb-indeterminate" if controller.some_selected else None,
            ),
            style={"width": "2.5rem"},
        )
    ]

    for column in controller.columns:
        label: Any = column.header
        if column.sortable:
            arrow = SORT_ARROWS.get(sort.direction, "") if sort.field == column.id else ""
            label = html.Button(
                f"{column.header}{arrow}",
                id=sort_header_id(column.id),
                n_clicks=0,
                className="btn btn-link p-0 text-reset text-decoration-none fw-semibold",
            )
        header_cells.append(
            html.Th(
                [label, html.Div(className="rb-resize-handle")],
                style={"width": f"{controller.width_of(column.id)}px", "position": "relative"},
            )
        )

    rows = controller.rows
    if not rows:
        body = [
            html.Tr(
                html.Td(
                    "No results found.",
                    colSpan=len(controller.columns) + 1,
                    className="text-center text-muted py-4",
                )
            )
        ]
    else:
        body = []
        for row in rows:
            row_id = row[controller.id_field]
            cells = [
                html.Td(
                    dbc.Checkbox(
                        id=row_select_id(row_id),
                        value=controller.is_selected(row_id),
                    )
                )
            ]
            cells.extend(html.Td(column.render(row)) for column in controller.columns)
            body.append(html.Tr(cells, className="table-active" if controller.is_selected(row_id) else None))

    return html.Div(
        dbc.Table(
            [html.Thead(html.Tr(header_cells)), html.Tbody(body)],
            hover=True,
            responsive=True,
            className="rb-table mb-0",
            style={"tableLayout": "fixed"},
        ),
        className="border rounded",
    )


# -----------------------------------------------------------------------------
# Grid mode
# -----------------------------------------------------------------------------
def render_grid(items: Sequence[Mapping[str, Any]], render_item: Callable[[Mapping[str, Any]], Any]) -> Any:
    if not items:
        return html.Div("No results found.", className="text-center text-muted py-4")
    return dbc.Row(
        [dbc.Col(render_item(item), xs=12, sm=6, lg=4, xl=3, className="mb-3") for item in items],
        className="g-3",
    )


# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------
def render_pagination(pagination: PaginationSpec) -> html.Div:
    page = pagination.page
    total_pages = pagination.total_pages

    def link(label: Any, target: int, role: str, disabled: bool = False, active: bool = False):
        return dbc.Button(
            label,
            id=page_link_id(target, role),
            n_clicks=0,
            size="sm",
            color="primary" if active else "light",
            disabled=disabled,
            className="me-1",
        )

    buttons: List[Any] = [
        link("«", 1, "first", disabled=page <= 1),
        link("‹", max(1, page - 1), "prev", disabled=page <= 1),
    ]
    for token in page_window(page, total_pages):
        if token == ELLIPSIS:
            buttons.append(html.Span(ELLIPSIS, className="mx-1 text-muted"))
        else:
            buttons.append(link(str(token), token, "page", active=token == page))
    buttons.extend(
        [
            link("›", page + 1, "next", disabled=page >= total_pages),
            link("»", max(1, total_pages), "last", disabled=page >= total_pages),
        ]
    )
    return html.Div(buttons, className="d-flex align-items-center flex-wrap")


def render_summary(pagination: PaginationSpec) -> str:
    if pagination.total == 0:
        return "No results"
    return f"Showing {pagination.first_item} to {pagination.last_item} of {pagination.total} results"


# -----------------------------------------------------------------------------
# Active filters / selection
# -----------------------------------------------------------------------------
def render_active_filters(state: ViewState, registry: Optional[FilterRegistry]) -> Any:
    if not state.has_active_filters():
        return None

    badges: List[Any] = [html.Span("Active filters:", className="small fw-semibold me-2")]
    for key, value in state.filters.items():
        definition = registry.get(key) if registry is not None else None
        label = definition.label if definition is not None else key
        badges.append(
            dbc.Badge(
                [
                    f"{label}: {describe(value)}",
                    html.Button(
                        "×",
                        id=filter_remove_id(key),
                        n_clicks=0,
                        className="btn btn-sm p-0 ms-1 border-0 text-reset",
                        title="Remove",
                    ),
                ],
                color="secondary",
                className="me-1 d-inline-flex align-items-center",
            )
        )
    badges.append(
        dbc.Button(
            "Clear all",
            id=filter_remove_id(CLEAR_ALL_INDEX),
            n_clicks=0,
            size="sm",
            color="link",
        )
    )
    return html.Div(badges, className="d-flex flex-wrap align-items-center mb-3")


def selection_text(selected: Sequence[Mapping[str, Any]]) -> str:
    count = len(selected)
    return f"{count} item{'' if count == 1 else 's'} selected"


def selection_bar_style(selected: Sequence[Any]) -> dict:
    return {} if selected else {"display": "none"}
