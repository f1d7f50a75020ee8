# test_pagination.py
import pytest

from qrmenu.services.pagination import clamp_page, paginate, total_pages_for, visible_pages


@pytest.mark.parametrize("n,size", [(0, 3), (1, 3), (7, 3), (9, 3), (25, 12), (12, 12)])
def test_pages_partition_the_list(n, size):
    items = list(range(n))
    first = paginate(items, size, 1)
    seen = []
    for page in range(1, first.total_pages + 1):
        p = paginate(items, size, page)
        assert len(p.items) <= size
        seen.extend(p.items)
    assert seen == items


def test_empty_list_is_one_empty_page():
    p = paginate([], 12, 1)
    assert p.items == []
    assert p.total_pages == 1
    assert p.total_items == 0
    assert not p.has_next and not p.has_prev
    assert p.start_item == 0 and p.end_item == 0
    assert p.visible_pages == [1]


def test_page_past_the_end_is_clamped():
    p = paginate(list(range(10)), 4, 99)
    assert p.page == 3
    assert p.items == [8, 9]
    assert p.has_prev and not p.has_next
    assert (p.start_item, p.end_item) == (9, 10)


def test_page_below_one_is_clamped():
    p = paginate(list(range(10)), 4, -3)
    assert p.page == 1
    assert p.items == [0, 1, 2, 3]


def test_same_input_same_page():
    items = ["a", "b", "c", "d", "e"]
    assert paginate(items, 2, 2) == paginate(items, 2, 2)


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        paginate([1, 2], 0, 1)


def test_helpers():
    assert total_pages_for(0, 5) == 1
    assert total_pages_for(11, 5) == 3
    assert clamp_page(0, 4) == 1
    assert clamp_page(5, 4) == 4


def test_visible_pages_window():
    assert visible_pages(6, 10) == [1, 4, 5, 6, 7, 8, 10]
    assert visible_pages(1, 10) == [1, 2, 3, 10]
    assert visible_pages(10, 10) == [1, 8, 9, 10]
    assert visible_pages(2, 3) == [1, 2, 3]
    assert visible_pages(1, 1) == [1]
