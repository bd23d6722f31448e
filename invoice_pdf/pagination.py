"""Helpers for estimating invoice pagination constraints."""

from __future__ import annotations

from .pdf_constants import (
    CONTENT_BOTTOM,
    FIRST_ROW_DY,
    ROW_PITCH,
    TABLE_START_Y_CONT,
    TABLE_START_Y_FIRST,
    TRAILER_H,
)


def first_row_y(first_page: bool) -> float:
    start = TABLE_START_Y_FIRST if first_page else TABLE_START_Y_CONT
    return start + FIRST_ROW_DY


def items_per_page(first_page: bool) -> int:
    return int((CONTENT_BOTTOM - first_row_y(first_page)) // ROW_PITCH)


def items_with_trailer(first_page: bool) -> int:
    """Rows that still leave room for the totals, payment and footer blocks."""
    room = CONTENT_BOTTOM - TRAILER_H - first_row_y(first_page)
    return max(0, int(room // ROW_PITCH))


def estimate_page_count(item_count: int) -> int:
    first = items_per_page(True)
    if item_count <= first:
        return 1 if item_count <= items_with_trailer(True) else 2

    cont = items_per_page(False)
    remaining = item_count - first
    extra_pages = (remaining + cont - 1) // cont
    last_page_rows = remaining - (extra_pages - 1) * cont
    trailer_page = 1 if last_page_rows > items_with_trailer(False) else 0
    return 1 + extra_pages + trailer_page


def max_items_for_pages(page_count: int) -> int:
    if page_count <= 1:
        return items_with_trailer(True)
    return (
        items_per_page(True)
        + items_per_page(False) * (page_count - 2)
        + items_with_trailer(False)
    )
