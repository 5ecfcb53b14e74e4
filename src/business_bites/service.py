"""Request orchestration: fetch, group, paginate and summarise articles."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Sequence, TypeVar

from .errors import InfrastructureError, NotFoundError, ValidationError
from .grouping import group_rows
from .pagination import paginate
from .rows import ArticleRow
from .sources import RowSource
from .summary import summarize


logger = logging.getLogger(__name__)

PER_PAGE = 12
SEARCH_MIN_LENGTH = 2
SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 50
DEFAULT_MARKETS = ["US", "China", "EU", "India", "Crypto"]
DEFAULT_SECTORS = [
    "Technology",
    "Healthcare",
    "Finance",
    "Energy",
    "Manufacturing",
    "Retail",
    "Real Estate",
]

_STORY_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

T = TypeVar("T")


def normalize_market(market: str | None, default: str = "US") -> str:
    """Canonical market code: stripped and upper-cased, ``default`` when blank."""
    if market is None or not market.strip():
        market = default
    return market.strip().upper()


class ArticleService:
    """Stateless per-call orchestration over an ordered list of row sources."""

    def __init__(
        self,
        sources: Sequence[RowSource],
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.sources = list(sources)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def source_names(self) -> list[str]:
        return [source.name for source in self.sources]

    def business_bites(
        self, market: str, page: int = 1, sector: str | None = None
    ) -> dict[str, Any]:
        """One page of bites for ``market``, optionally narrowed to an exact ``sector``.

        The sector filter applies before grouping so page counts are story counts
        within the sector. The daily summary always covers the whole market.
        """
        rows = self._with_fallback("fetch_rows", lambda source: source.fetch_rows(market))
        story_rows = rows if sector is None else [row for row in rows if row.sector == sector]
        aggregates = group_rows(story_rows)
        page_items, page_result = paginate(aggregates, page, PER_PAGE)

        try:
            daily_summary = summarize(rows, now=self.clock())
        except Exception:
            logger.warning("Daily summary failed for market %s", market, exc_info=True)
            daily_summary = None

        logger.info(
            "Business bites market=%s sector=%s page=%s rows=%s stories=%s returned=%s",
            market,
            sector,
            page,
            len(rows),
            page_result.total_articles,
            len(page_items),
        )
        return {
            "articles": [aggregate.to_dict() for aggregate in page_items],
            "market": market,
            "pagination": page_result.to_dict(),
            "daily_summary": daily_summary.to_dict() if daily_summary else None,
        }

    def get_article(self, story_id: str) -> dict[str, Any]:
        story_id = (story_id or "").strip()
        if not _STORY_ID_PATTERN.match(story_id):
            raise ValidationError("Article ID is required")
        rows = self._with_fallback("fetch_story", lambda source: source.fetch_story(story_id))
        aggregates = group_rows(rows)
        for aggregate in aggregates:
            if aggregate.key == ("story", story_id):
                return aggregate.to_dict()
        for aggregate in aggregates:
            analysis_id = aggregate.primary.news_analysis_id
            if analysis_id is not None and str(analysis_id) == story_id:
                return aggregate.to_dict()
        raise NotFoundError("Article not found", identifier=story_id)

    def search(
        self, query: str | None, market: str, limit: int = SEARCH_DEFAULT_LIMIT
    ) -> dict[str, Any]:
        term = (query or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            raise ValidationError(
                f"Search query must be at least {SEARCH_MIN_LENGTH} characters"
            )
        if not 1 <= limit <= SEARCH_MAX_LIMIT:
            raise ValidationError(f"limit must be between 1 and {SEARCH_MAX_LIMIT}")

        rows = self._with_fallback("fetch_rows", lambda source: source.fetch_rows(market))
        matches = [row for row in rows if _matches(row, term.lower())]
        aggregates = group_rows(matches)[:limit]
        logger.info(
            "Search query=%r market=%s matched_rows=%s returned=%s",
            term,
            market,
            len(matches),
            len(aggregates),
        )
        return {
            "articles": [aggregate.to_dict() for aggregate in aggregates],
            "query": term,
            "market": market,
            "total": len(aggregates),
        }

    def list_markets(self) -> list[str]:
        return self._distinct_or_default("market", None, DEFAULT_MARKETS)

    def list_sectors(self, market: str | None = None) -> list[str]:
        return self._distinct_or_default("sector", market, DEFAULT_SECTORS)

    def _distinct_or_default(
        self, column: str, market: str | None, default: list[str]
    ) -> list[str]:
        try:
            values = self._with_fallback(
                f"distinct_values({column})",
                lambda source: source.distinct_values(column, market=market),
            )
        except InfrastructureError:
            logger.warning("Could not read %s values from any backend, using defaults", column)
            return list(default)
        return values or list(default)

    def _with_fallback(self, operation: str, call: Callable[[RowSource], T]) -> T:
        """Try each source in order, moving on only after an ``InfrastructureError``."""
        if not self.sources:
            raise InfrastructureError("No row sources configured")
        last_error: InfrastructureError | None = None
        for index, source in enumerate(self.sources):
            try:
                return call(source)
            except InfrastructureError as exc:
                last_error = exc
                remaining = len(self.sources) - index - 1
                logger.warning(
                    "%s failed on %s (%s); %s fallback source(s) left",
                    operation,
                    source.name,
                    exc,
                    remaining,
                )
        raise InfrastructureError(
            f"All row sources failed: {last_error}", backend=last_error.backend if last_error else None
        ) from last_error


def _matches(row: ArticleRow, term: str) -> bool:
    return any(term in (value or "").lower() for value in (row.title, row.summary))


__all__ = ["ArticleService", "normalize_market", "PER_PAGE", "DEFAULT_MARKETS", "DEFAULT_SECTORS"]
