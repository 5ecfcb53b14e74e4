"""Flat article rows as stored in ``business_bites_display``."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class ArticleRow:
    """One contributing source record for a story."""

    business_bites_news_id: Any = None
    news_analysis_id: Any = None
    title: str | None = None
    summary: str | None = None
    summary_short: str | None = None
    market: str | None = None
    sector: str | None = None
    impact_score: float | None = None
    sentiment: str | None = None
    link: str | None = None
    url_to_image: str | None = None
    thumbnail_url: str | None = None
    published_at: str | None = None
    source_system: str | None = None
    author: str | None = None
    alternative_sources: str | None = None
    rank: int | None = None
    slno: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ArticleRow":
        return cls(
            business_bites_news_id=data.get("business_bites_news_id"),
            news_analysis_id=data.get("news_analysis_id"),
            title=data.get("title"),
            summary=data.get("summary"),
            summary_short=data.get("summary_short"),
            market=data.get("market"),
            sector=data.get("sector"),
            impact_score=_to_float(data.get("impact_score")),
            sentiment=data.get("sentiment"),
            link=data.get("link"),
            url_to_image=data.get("urlToImage", data.get("url_to_image")),
            thumbnail_url=data.get("thumbnail_url"),
            published_at=_to_text(data.get("published_at")),
            source_system=data.get("source_system"),
            author=data.get("author"),
            alternative_sources=_to_text(data.get("alternative_sources")),
            rank=_to_int(data.get("rank")),
            slno=_to_int(data.get("slno")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "business_bites_news_id": self.business_bites_news_id,
            "news_analysis_id": self.news_analysis_id,
            "title": self.title,
            "summary": self.summary,
            "summary_short": self.summary_short,
            "market": self.market,
            "sector": self.sector,
            "impact_score": self.impact_score,
            "sentiment": self.sentiment,
            "link": self.link,
            "urlToImage": self.url_to_image,
            "thumbnail_url": self.thumbnail_url,
            "published_at": self.published_at,
            "source_system": self.source_system,
            "author": self.author,
            "alternative_sources": self.alternative_sources,
            "rank": self.rank,
            "slno": self.slno,
        }

    def published_datetime(self) -> datetime | None:
        return parse_timestamp(self.published_at)


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 string into an aware UTC datetime.

    Naive values are taken as UTC. Anything unparseable returns ``None``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def recency_key(value: object) -> datetime:
    """Sort key for newest-first ordering; unparseable timestamps rank as oldest."""
    return parse_timestamp(value) or _OLDEST


def _to_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _to_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _to_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


__all__ = ["ArticleRow", "parse_timestamp", "recency_key"]
