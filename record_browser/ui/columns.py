from __future__ import annotations

from typing import Any, List, Mapping

import dash_bootstrap_components as dbc
from dash import html

from record_browser.core.columns import ColumnDef

STATUS_COLOURS = {
    "active": "primary",
    "archived": "secondary",
    "draft": "light",
}


def _status_badge(status: Any) -> dbc.Badge:
    colour = STATUS_COLOURS.get(str(status), "light")
    return dbc.Badge(str(status), color=colour, text_color="dark" if colour == "light" else None)


def _name_cell(row: Mapping[str, Any]) -> html.Div:
    description = str(row.get("description") or "")
    return html.Div(
        [
            html.Div(row.get("name", ""), className="fw-medium"),
            html.Div(f"{description[:30]}...", className="small text-muted"),
        ],
        className="d-flex flex-column",
    )


def _price_cell(row: Mapping[str, Any]) -> html.Span:
    return html.Span(f"${row.get('price', 0)}")


def _rating_cell(row: Mapping[str, Any]) -> html.Div:
    rating = float(row.get("rating") or 0)
    return html.Div(
        [
            html.Span(f"{rating}", className="me-2"),
            dbc.Progress(value=rating / 5 * 100, style={"width": "6rem", "height": "0.5rem"}),
        ],
        className="d-flex align-items-center",
    )


def product_columns() -> List[ColumnDef]:
    """Column set for the product catalogue table."""
    return [
        ColumnDef("name", "Product", "name", cell=_name_cell, sortable=True, width=220),
        ColumnDef("category", "Category", "category", sortable=True),
        ColumnDef("price", "Price", "price", cell=_price_cell, sortable=True, width=110),
        ColumnDef("stock", "Stock", "stock", sortable=True, width=100),
        ColumnDef("rating", "Rating", "rating", cell=_rating_cell, sortable=True, min_width=140),
        ColumnDef("status", "Status", "status", cell=lambda row: _status_badge(row.get("status")), sortable=True),
        ColumnDef("dateAdded", "Date Added", "dateAdded", sortable=True),
        ColumnDef("tags", "Tags", lambda row: ", ".join(row.get("tags") or []), max_width=300),
    ]


def render_product_card(row: Mapping[str, Any]) -> dbc.Card:
    """Grid-mode renderer for one product."""
    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div(
                    [html.Strong(row.get("name", "")), _status_badge(row.get("status"))],
                    className="d-flex justify-content-between align-items-center",
                )
            ),
            dbc.CardBody(
                [
                    html.P(row.get("description", ""), className="small text-muted"),
                    html.Div(
                        [
                            html.Span(f"${row.get('price', 0)}", className="fw-semibold"),
                            html.Span(f"★ {row.get('rating', '')}"),
                            html.Span(f"{row.get('stock', 0)} in stock"),
                        ],
                        className="d-flex justify-content-between",
                    ),
                    html.Div(
                        [dbc.Badge(tag, color="info", className="me-1") for tag in row.get("tags") or []],
                        className="mt-2",
                    ),
                ]
            ),
        ],
        className="h-100 shadow-sm",
    )
