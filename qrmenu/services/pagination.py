import math
from dataclasses import dataclass, field
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

VISIBLE_DELTA = 2  # pages shown either side of the current one


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool
    start_item: int
    end_item: int
    visible_pages: list[int] = field(default_factory=list)


def total_pages_for(total_items: int, page_size: int) -> int:
    if total_items <= 0:
        return 1
    return math.ceil(total_items / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, total_pages))


def visible_pages(current: int, total_pages: int, delta: int = VISIBLE_DELTA) -> list[int]:
    """
    First page, last page and a window of ``delta`` pages around ``current``,
    ascending and without duplicates: visible_pages(6, 10) -> [1, 4, 5, 6, 7, 8, 10].
    """
    if total_pages <= 1:
        return [1]
    window = range(max(2, current - delta), min(total_pages - 1, current + delta) + 1)
    return sorted({1, total_pages, *window})


def paginate(items: Sequence[T], page_size: int, current_page: int) -> Page[T]:
    """
    Slice ``items`` into the requested page.

    Pure: the same arguments always give the same page. Out-of-range pages are
    clamped to the nearest valid one, and an empty list is a single empty page.
    """
    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    total_items = len(items)
    total_pages = total_pages_for(total_items, page_size)
    page = clamp_page(current_page, total_pages)

    start = (page - 1) * page_size
    end = min(start + page_size, total_items)

    return Page(
        items=list(items[start:end]),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_items=total_items,
        has_next=page < total_pages,
        has_prev=page > 1,
        start_item=0 if total_items == 0 else start + 1,
        end_item=end,
        visible_pages=visible_pages(page, total_pages),
    )
