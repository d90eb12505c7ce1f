from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List

import dash
import pandas as pd
from dash import ALL, Input, Output, State, dcc, exceptions

from record_browser.core.table_controller import TableController
from record_browser.ui.ids import IDs
from record_browser.ui.render import selection_bar_style, selection_text

if TYPE_CHECKING:
    from record_browser.ui.config import AppConfig

logger = logging.getLogger(__name__)

C = IDs.Control
ROW_SELECT_ALL = {"type": IDs.Pattern.ROW_SELECT, "index": ALL}


def _log_selection(items: List[Dict[str, Any]]) -> None:
    logger.debug("selection_changed", extra={"n_selected": len(items)})


def register_table_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    dataset_key = ctx.collection.identity if ctx.collection is not None else None
    id_field = ctx.collection.id_field if ctx.collection is not None else "id"

    # ---------------------------------------------------------
    # Row / header checkboxes -> selection
    # ---------------------------------------------------------
    @app.callback(
        Output(C.SELECT_ALL, "value"),
        Output(ROW_SELECT_ALL, "value"),
        Output(IDs.Store.TABLE_STATE, "data", allow_duplicate=True),
        Output(C.SELECTION_TEXT, "children", allow_duplicate=True),
        Output(C.SELECTION_BAR, "style", allow_duplicate=True),
        Input(C.SELECT_ALL, "value"),
        Input(ROW_SELECT_ALL, "value"),
        Input(C.CLEAR_SELECTION_BTN, "n_clicks"),
        State(IDs.Store.PAGE_DATA, "data"),
        State(IDs.Store.TABLE_STATE, "data"),
        prevent_initial_call=True,
    )
    def update_selection(select_all, _row_values, clear_clicks, page_data, table_state):
        triggered_id = dash.ctx.triggered_id
        if triggered_id is None:
            raise exceptions.PreventUpdate

        controller = TableController.from_dict(table_state, ctx.columns, dataset_key, id_field)
        controller.load_rows(page_data or [])
        controller.on_selection_change = _log_selection

        # Checkbox values are echoed back below, so only act when the UI
        # disagrees with the controller.
        if triggered_id == C.SELECT_ALL:
            if bool(select_all) != controller.all_selected:
                controller.toggle_all()
        elif triggered_id == C.CLEAR_SELECTION_BTN:
            if not clear_clicks:
                raise exceptions.PreventUpdate
            controller.clear_selection()
        elif isinstance(triggered_id, dict) and triggered_id.get("type") == IDs.Pattern.ROW_SELECT:
            row_id = triggered_id.get("index")
            checked = bool(dash.ctx.triggered[0]["value"])
            if checked != controller.is_selected(row_id):
                controller.toggle_row(row_id)
        else:
            raise exceptions.PreventUpdate

        row_outputs = dash.ctx.outputs_list[1]
        row_values = [controller.is_selected(output["id"]["index"]) for output in row_outputs]

        selected = controller.selected_items()
        return (
            controller.all_selected,
            row_values,
            controller.to_dict(),
            selection_text(selected),
            selection_bar_style(selected),
        )

    # ---------------------------------------------------------
    # Table / grid toggle
    # ---------------------------------------------------------
    @app.callback(
        Output(C.TABLE_CONTAINER, "style"),
        Output(C.GRID_CONTAINER, "style"),
        Input(C.VIEW_MODE, "value"),
    )
    def toggle_view_mode(mode):
        hidden = {"display": "none"}
        if mode == "grid":
            return hidden, {}
        return {}, hidden

    # ---------------------------------------------------------
    # Export selected rows as CSV
    # ---------------------------------------------------------
    @app.callback(
        Output(C.DOWNLOAD_SELECTION, "data"),
        Input(C.EXPORT_SELECTION_BTN, "n_clicks"),
        State(IDs.Store.PAGE_DATA, "data"),
        State(IDs.Store.TABLE_STATE, "data"),
        prevent_initial_call=True,
    )
    def export_selection(n_clicks, page_data, table_state):
        if not n_clicks:
            raise exceptions.PreventUpdate

        controller = TableController.from_dict(table_state, ctx.columns, dataset_key, id_field)
        controller.load_rows(page_data or [])
        selected = controller.selected_items()
        if not selected:
            raise exceptions.PreventUpdate

        df = pd.DataFrame.from_records(selected)
        if "tags" in df.columns:
            df["tags"] = df["tags"].apply(lambda v: ";".join(v) if isinstance(v, list) else v)

        logger.info("selection_exported", extra={"n_rows": len(df)})
        return dcc.send_data_frame(df.to_csv, "selected_records.csv", index=False)
