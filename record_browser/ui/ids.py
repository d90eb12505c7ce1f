from __future__ import annotations

__all__ = [
    "IDs",
    "sort_header_id",
    "row_select_id",
    "page_link_id",
    "filter_remove_id",
    "CLEAR_ALL_INDEX",
]

CLEAR_ALL_INDEX = "__all__"


class IDs:
    class Store:
        PAGE_DATA = "page-data"
        TABLE_STATE = "table-state"

    class Control:
        URL = "url"

        # Filter panel
        SEARCH_INPUT = "search-input"
        SEARCH_CLEAR_BTN = "search-clear-btn"
        CLEAR_FILTERS_BTN = "clear-filters-btn"
        STATUS_RADIO = "status-radio"
        CATEGORY_CHECKLIST = "category-checklist"
        PRICE_MIN = "price-min-input"
        PRICE_MAX = "price-max-input"
        RATING_SELECT = "rating-select"
        TAG_CHECKLIST = "tag-checklist"
        IN_STOCK_SWITCH = "in-stock-switch"
        DATE_FROM = "date-from-picker"
        DATE_TO = "date-to-picker"

        # Results
        STATUS_TABS = "status-tabs"
        VIEW_MODE = "view-mode"
        ACTIVE_FILTERS = "active-filters"
        TABLE_CONTAINER = "table-container"
        GRID_CONTAINER = "grid-container"
        SELECT_ALL = "select-all-checkbox"
        SELECTION_BAR = "selection-bar"
        SELECTION_TEXT = "selection-text"
        CLEAR_SELECTION_BTN = "clear-selection-btn"
        EXPORT_SELECTION_BTN = "export-selection-btn"
        DOWNLOAD_SELECTION = "download-selection"

        # Pagination
        PAGINATION_LINKS = "pagination-links"
        PAGINATION_SUMMARY = "pagination-summary"
        PAGE_SIZE_SELECT = "page-size-select"

        # Notifications
        ERROR_TOAST = "error-toast"

    class Pattern:
        # pattern-matching "type" strings
        SORT_HEADER = "sort-header"
        ROW_SELECT = "row-select"
        PAGE_LINK = "page-link"
        FILTER_REMOVE = "filter-remove"


def sort_header_id(column_id: str) -> dict:
    return {"type": IDs.Pattern.SORT_HEADER, "index": column_id}


def row_select_id(row_id) -> dict:
    return {"type": IDs.Pattern.ROW_SELECT, "index": row_id}


def page_link_id(target: int, role: str = "page") -> dict:
    # role keeps prev/next/first/last unique when they point at a listed page
    return {"type": IDs.Pattern.PAGE_LINK, "index": target, "role": role}


def filter_remove_id(key: str) -> dict:
    return {"type": IDs.Pattern.FILTER_REMOVE, "index": key}
