from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, List

import dash
from dash import ALL, Input, Output, State, exceptions, no_update

from record_browser.core.table_controller import TableController
from record_browser.services.view_state_store import Notification, ViewStateStore
from record_browser.ui.events import apply_control_event, control_values
from record_browser.ui.ids import IDs
from record_browser.ui.render import (
    render_active_filters,
    render_grid,
    render_pagination,
    render_summary,
    render_table,
    selection_bar_style,
    selection_text,
)

if TYPE_CHECKING:
    from record_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)

C = IDs.Control

# Order matters: matches ControlValues.as_tuple()
CONTROL_OUTPUTS = [
    Output(C.SEARCH_INPUT, "value"),
    Output(C.STATUS_RADIO, "value"),
    Output(C.CATEGORY_CHECKLIST, "value"),
    Output(C.PRICE_MIN, "value"),
    Output(C.PRICE_MAX, "value"),
    Output(C.RATING_SELECT, "value"),
    Output(C.TAG_CHECKLIST, "value"),
    Output(C.IN_STOCK_SWITCH, "value"),
    Output(C.DATE_FROM, "date"),
    Output(C.DATE_TO, "date"),
    Output(C.STATUS_TABS, "active_tab"),
    Output(C.PAGE_SIZE_SELECT, "value"),
]

RESULT_OUTPUTS = [
    Output(C.TABLE_CONTAINER, "children"),
    Output(C.GRID_CONTAINER, "children"),
    Output(C.PAGINATION_LINKS, "children"),
    Output(C.PAGINATION_SUMMARY, "children"),
    Output(C.ACTIVE_FILTERS, "children"),
    Output(IDs.Store.PAGE_DATA, "data"),
    Output(IDs.Store.TABLE_STATE, "data"),
    Output(C.SELECTION_TEXT, "children"),
    Output(C.SELECTION_BAR, "style"),
]

TOAST_OUTPUTS = [
    Output(C.ERROR_TOAST, "is_open"),
    Output(C.ERROR_TOAST, "children"),
]

CONTROL_INPUTS = [
    Input(C.SEARCH_INPUT, "value"),
    Input(C.SEARCH_CLEAR_BTN, "n_clicks"),
    Input(C.CLEAR_FILTERS_BTN, "n_clicks"),
    Input(C.STATUS_RADIO, "value"),
    Input(C.CATEGORY_CHECKLIST, "value"),
    Input(C.PRICE_MIN, "value"),
    Input(C.PRICE_MAX, "value"),
    Input(C.RATING_SELECT, "value"),
    Input(C.TAG_CHECKLIST, "value"),
    Input(C.IN_STOCK_SWITCH, "value"),
    Input(C.DATE_FROM, "date"),
    Input(C.DATE_TO, "date"),
    Input(C.STATUS_TABS, "active_tab"),
    Input(C.PAGE_SIZE_SELECT, "value"),
    Input({"type": IDs.Pattern.SORT_HEADER, "index": ALL}, "n_clicks"),
    Input({"type": IDs.Pattern.PAGE_LINK, "index": ALL, "role": ALL}, "n_clicks"),
    Input({"type": IDs.Pattern.FILTER_REMOVE, "index": ALL}, "n_clicks"),
]

BUTTON_IDS = {C.SEARCH_CLEAR_BTN, C.CLEAR_FILTERS_BTN}


def _is_spurious(triggered_id: Any, value: Any) -> bool:
    """
    Buttons fire with n_clicks 0/None when they are (re)rendered; only real
    clicks count.
    """
    if isinstance(triggered_id, dict) or triggered_id in BUTTON_IDS:
        return not value
    return False


def _canonical_search(store: ViewStateStore) -> str:
    return "?" + store.url()


def register_view_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    dataset_key = ctx.collection.identity if ctx.collection is not None else None
    id_field = ctx.collection.id_field if ctx.collection is not None else "id"
    n_results = len(RESULT_OUTPUTS)

    # ---------------------------------------------------------
    # URL <-> ViewState <-> controls <-> results
    #
    # One callback owns the URL, the control values and the rendered
    # page, so the URL and the controls can never drift apart.
    # ---------------------------------------------------------
    @app.callback(
        Output(C.URL, "search"),
        *CONTROL_OUTPUTS,
        *RESULT_OUTPUTS,
        *TOAST_OUTPUTS,
        Input(C.URL, "search"),
        *CONTROL_INPUTS,
        State(IDs.Store.TABLE_STATE, "data"),
    )
    def sync_view(search, *args):
        table_state = args[-1]
        triggered_id = dash.ctx.triggered_id
        triggered_value = dash.ctx.triggered[0]["value"] if dash.ctx.triggered else None

        # triggered_id is None on page load, and again when freshly rendered
        # headers/links are inserted; only the first one carries no table state
        if triggered_id is None and table_state is not None:
            raise exceptions.PreventUpdate

        notifications: List[Notification] = []
        store = ViewStateStore.from_url(
            ctx.source,
            search,
            codec=ctx.codec,
            notify=notifications.append,
        )

        from_url = triggered_id is None or triggered_id == C.URL
        if not from_url:
            if _is_spurious(triggered_id, triggered_value):
                raise exceptions.PreventUpdate
            changed = apply_control_event(store, triggered_id, triggered_value, ctx.columns)
            if not changed:
                raise exceptions.PreventUpdate
            logger.info(
                "view_state_changed",
                extra={"trigger": str(triggered_id), "url": store.url()},
            )

        ok = store.refresh_blocking()

        canonical = _canonical_search(store)
        url_out = no_update if canonical == (search or "") else canonical
        controls = control_values(store.state).as_tuple()

        if not ok:
            message = notifications[-1].message if notifications else "Failed to load records."
            return (url_out, *controls, *([no_update] * n_results), True, message)

        controller = TableController.from_dict(table_state, ctx.columns, dataset_key, id_field)
        controller.on_selection_change = store.on_selection_change
        controller.load_rows(store.items)

        state = store.state
        selected = controller.selected_items()
        results = (
            render_table(controller, state.sort),
            render_grid(store.items, ctx.render_item),
            render_pagination(state.pagination),
            render_summary(state.pagination),
            render_active_filters(state, ctx.registry),
            store.items,
            controller.to_dict(),
            selection_text(selected),
            selection_bar_style(selected),
        )
        return (url_out, *controls, *results, False, no_update)
