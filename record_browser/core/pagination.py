from __future__ import annotations

from typing import List, Union

ELLIPSIS = "..."
MAX_PAGES_SHOWN = 7

PageToken = Union[int, str]


def page_window(current_page: int, total_pages: int) -> List[PageToken]:
    """
    Page numbers (and ellipsis markers) to show in pagination controls.

    Up to 7 pages are listed verbatim; beyond that the first and last page are
    always shown, with a window around the current page and ellipses for the
    gaps. Never more than 9 tokens.

    >>> page_window(10, 20)
    [1, '...', 9, 10, 11, '...', 20]
    """
    if total_pages <= MAX_PAGES_SHOWN:
        return list(range(1, total_pages + 1))

    tokens: List[PageToken] = [1]

    start_page = max(current_page - 1, 2)
    end_page = min(current_page + 1, total_pages - 1)

    # Near the beginning
    if current_page <= 3:
        end_page = 5

    # Near the end
    if current_page >= total_pages - 2:
        start_page = total_pages - 4

    if start_page > 2:
        tokens.append(ELLIPSIS)

    tokens.extend(range(start_page, end_page + 1))

    if end_page < total_pages - 1:
        tokens.append(ELLIPSIS)

    tokens.append(total_pages)
    return tokens
