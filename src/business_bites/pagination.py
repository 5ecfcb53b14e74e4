"""Offset pagination over grouped aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Sequence, TypeVar


T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class PageResult:
    current_page: int
    total_pages: int
    total_articles: int
    has_previous: bool
    has_next: bool

    @classmethod
    def empty(cls) -> "PageResult":
        return cls(current_page=1, total_pages=0, total_articles=0, has_previous=False, has_next=False)

    def to_dict(self) -> dict[str, object]:
        return {
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "total_articles": self.total_articles,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
            "previous_page": self.current_page - 1 if self.has_previous else None,
            "next_page": self.current_page + 1 if self.has_next else None,
        }


def paginate(items: Sequence[T], page: int, per_page: int) -> tuple[list[T], PageResult]:
    """Slice ``items`` for ``page``; the page is not clamped to the available range."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if per_page < 1:
        raise ValueError("per_page must be > 0")
    total = len(items)
    total_pages = ceil(total / per_page) if total else 0
    offset = (page - 1) * per_page
    page_items = list(items[offset : offset + per_page])
    result = PageResult(
        current_page=page,
        total_pages=total_pages,
        total_articles=total,
        has_previous=page > 1,
        has_next=page < total_pages,
    )
    return page_items, result


__all__ = ["PageResult", "paginate"]
