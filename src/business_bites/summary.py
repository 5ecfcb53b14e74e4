"""Rolling-window market digest computed over raw (ungrouped) rows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from .rows import ArticleRow, parse_timestamp


WINDOW = timedelta(hours=48)
POSITIVE_THRESHOLD = 7.5
NEGATIVE_THRESHOLD = 5.5


@dataclass(slots=True, frozen=True)
class DailySummary:
    total_articles: int
    avg_impact_score: float
    sentiment: str

    @property
    def text(self) -> str:
        return (
            f"Market activity shows {self.sentiment} sentiment with {self.total_articles} "
            f"articles averaging {self.avg_impact_score:.1f} impact score."
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "total_articles": self.total_articles,
            "avg_impact_score": self.avg_impact_score,
            "sentiment": self.sentiment,
            "summary": self.text,
        }


def sentiment_label(avg_impact_score: float) -> str:
    if avg_impact_score >= POSITIVE_THRESHOLD:
        return "positive"
    if avg_impact_score <= NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def summarize(rows: Iterable[ArticleRow], now: datetime | None = None) -> DailySummary | None:
    """Digest rows published within the last 48 hours of ``now``.

    Every row counts, including duplicate coverage of the same story. Rows
    with a missing or unparseable ``published_at`` fall outside the window.
    Returns ``None`` when the window is empty.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - WINDOW

    scores: list[float] = []
    for row in rows:
        published = parse_timestamp(row.published_at)
        if published is None or published < cutoff:
            continue
        scores.append(row.impact_score or 0.0)

    if not scores:
        return None
    average = round(sum(scores) / len(scores), 1)
    return DailySummary(
        total_articles=len(scores),
        avg_impact_score=average,
        sentiment=sentiment_label(average),
    )


__all__ = ["DailySummary", "sentiment_label", "summarize", "WINDOW"]
