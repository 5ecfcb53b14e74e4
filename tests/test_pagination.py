from __future__ import annotations

import pytest

from business_bites.pagination import PageResult, paginate


def test_pagination_arithmetic():
    items = list(range(25))
    page_items, result = paginate(items, page=3, per_page=12)
    assert result.total_pages == 3
    assert result.total_articles == 25
    assert page_items == [24]
    assert result.has_previous is True
    assert result.has_next is False


@pytest.mark.parametrize("total", [0, 1, 11, 12, 13, 24, 25, 100])
def test_pages_cover_every_item(total):
    items = list(range(total))
    _, first = paginate(items, page=1, per_page=12)
    collected = []
    for page in range(1, first.total_pages + 1):
        page_items, _ = paginate(items, page=page, per_page=12)
        collected.extend(page_items)
    assert collected == items


def test_out_of_range_page_is_empty_and_not_clamped():
    items = list(range(30))
    page_items, result = paginate(items, page=3 + 5, per_page=12)
    assert page_items == []
    assert result.current_page == 8
    assert result.has_next is False
    assert result.has_previous is True


def test_empty_collection():
    page_items, result = paginate([], page=1, per_page=12)
    assert page_items == []
    assert result.total_pages == 0
    assert result.has_next is False
    assert result.has_previous is False


def test_to_dict_includes_neighbour_pages():
    _, result = paginate(list(range(30)), page=2, per_page=12)
    assert result.to_dict() == {
        "current_page": 2,
        "total_pages": 3,
        "total_articles": 30,
        "has_previous": True,
        "has_next": True,
        "previous_page": 1,
        "next_page": 3,
    }
    _, first = paginate(list(range(5)), page=1, per_page=12)
    assert first.to_dict()["previous_page"] is None
    assert first.to_dict()["next_page"] is None


def test_rejects_invalid_arguments():
    with pytest.raises(ValueError):
        paginate([1], page=0, per_page=12)
    with pytest.raises(ValueError):
        paginate([1], page=1, per_page=0)


def test_empty_page_result():
    assert PageResult.empty().to_dict()["total_articles"] == 0
