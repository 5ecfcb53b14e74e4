"""Fold flat source rows into one aggregate article per story."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable

from .rows import ArticleRow, recency_key


@dataclass(slots=True)
class SourceLink:
    title: str | None
    source: str | None
    url: str | None
    published_at: str | None
    rank: int | None

    @classmethod
    def from_row(cls, row: ArticleRow) -> "SourceLink":
        return cls(
            title=row.title,
            source=row.source_system,
            url=row.link,
            published_at=row.published_at,
            rank=row.rank,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "source": self.source,
            "url": self.url,
            "published_at": self.published_at,
            "rank": self.rank,
        }


@dataclass(slots=True)
class ArticleAggregate:
    """A user-facing bite: the first row seen for a story plus every contributing link."""

    key: Hashable
    primary: ArticleRow
    source_links: list[SourceLink] = field(default_factory=list)

    @property
    def published_at(self) -> str | None:
        return self.primary.published_at

    def to_dict(self) -> dict[str, Any]:
        row = self.primary
        return {
            "business_bites_news_id": row.business_bites_news_id,
            "title": row.title,
            "summary": row.summary,
            "market": row.market,
            "sector": row.sector,
            "impact_score": row.impact_score,
            "sentiment": row.sentiment,
            "link": row.link,
            "urlToImage": row.url_to_image,
            "thumbnail_url": row.thumbnail_url,
            "published_at": row.published_at,
            "source_system": row.source_system,
            "author": row.author,
            "summary_short": row.summary_short,
            "alternative_sources": row.alternative_sources,
            "rank": row.rank,
            "slno": row.slno,
            "source_links": [link.to_dict() for link in self.source_links],
        }


def grouping_key(row: ArticleRow, position: int) -> Hashable:
    """Story key: grouping id, else analysis id, else a token unique to this row.

    ``position`` is the row's index in the input and only matters for rows
    carrying neither id and no sequence number.
    """
    if row.business_bites_news_id is not None:
        return ("story", str(row.business_bites_news_id))
    if row.news_analysis_id is not None:
        return ("story", str(row.news_analysis_id))
    if row.slno is not None:
        return ("row", row.slno)
    return ("position", position)


def group_rows(rows: Iterable[ArticleRow]) -> list[ArticleAggregate]:
    """Group rows by story and return aggregates newest first.

    The primary row of each aggregate is the first one encountered, and it is
    also the first entry of its ``source_links``. Ties on ``published_at`` keep
    first-seen order.
    """
    grouped: dict[Hashable, ArticleAggregate] = {}
    for position, row in enumerate(rows):
        key = grouping_key(row, position)
        aggregate = grouped.get(key)
        if aggregate is None:
            aggregate = ArticleAggregate(key=key, primary=row)
            grouped[key] = aggregate
        aggregate.source_links.append(SourceLink.from_row(row))
    return sorted(
        grouped.values(), key=lambda item: recency_key(item.published_at), reverse=True
    )


__all__ = ["SourceLink", "ArticleAggregate", "grouping_key", "group_rows"]
