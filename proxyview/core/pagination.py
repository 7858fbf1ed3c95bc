"""Conversion between page numbers and the offset/limit of table controls."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .model import LazyLoadEvent, finite_number
from .sorting import SortSpec


@dataclass(frozen=True)
class PageWindow:
    """Offset/limit pair understood by a lazily loaded table."""

    offset: int
    limit: int


@dataclass(frozen=True)
class PageState:
    """What the table shows: page position plus the page-local sort."""

    page: int
    page_size: int
    sort: SortSpec = SortSpec()


def to_request(page: int, page_size: int) -> PageWindow:
    """Return the offset/limit addressing *page* (1-based)."""
    if page_size <= 0:
        raise ValueError("page_size must be > 0")
    return PageWindow(offset=(max(1, page) - 1) * page_size, limit=page_size)


def from_lazy_event(event: LazyLoadEvent, current_page_size: int) -> tuple[int, int]:
    """Return ``(page, page_size)`` described by a lazy-load *event*.

    A missing or invalid row count keeps *current_page_size*; a missing
    offset counts as 0 and lands on the first page.
    """
    rows = finite_number(event.rows)
    page_size = int(rows) if rows is not None and rows >= 1 else current_page_size
    first = finite_number(event.first) or 0.0
    page = math.floor(max(0.0, first) / page_size) + 1
    return max(1, page), page_size


def resolve_sort_field(sort_field: str | list[str] | None, current: str | None) -> str | None:
    """Pick the effective sort field of an event, keeping *current* when absent."""
    if not sort_field:
        return current
    if isinstance(sort_field, (list, tuple)):
        return sort_field[0] if sort_field else current
    return sort_field


def should_refetch(previous: PageState, current: PageState) -> bool:
    """Return ``True`` when the page or page size moved.

    Sorting is page-local, so a change of sort alone never requires new
    data.
    """
    return previous.page != current.page or previous.page_size != current.page_size


__all__ = [
    "PageState",
    "PageWindow",
    "from_lazy_event",
    "resolve_sort_field",
    "should_refetch",
    "to_request",
]
