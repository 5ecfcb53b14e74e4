"""Row sources: the interchangeable backends articles are read from.

Three variants share one interface and are tried in configured order by the
service layer:

* ``SupabaseRowSource`` -- the remote Postgres table exposed through PostgREST.
* ``StaticRowSource`` -- a JSON export of the same table.
* ``SqliteRowSource`` -- the local SQLite copy, accessed through SQLAlchemy.

Each variant filters by exact market string and returns rows in its natural
order; grouping and sorting happen later. Backend failures surface as
``InfrastructureError``.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings
from .errors import InfrastructureError
from .models import BusinessBiteRecord
from .rows import ArticleRow, recency_key
from .supabase_client import SupabaseClient


logger = logging.getLogger(__name__)

DISTINCT_COLUMNS = ("market", "sector")


class RowSource(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch_rows(self, market: str) -> list[ArticleRow]:
        """Return every row whose market equals ``market`` exactly."""

    @abstractmethod
    def fetch_story(self, story_id: str) -> list[ArticleRow]:
        """Return rows whose grouping id or analysis id equals ``story_id``, newest first."""

    @abstractmethod
    def distinct_values(self, column: str, market: str | None = None) -> list[str]:
        """Return the sorted, non-empty distinct values of ``market`` or ``sector``."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class SupabaseRowSource(RowSource):
    name = "supabase"

    def __init__(self, client: SupabaseClient, table: str = "business_bites_display") -> None:
        self.client = client
        self.table = table

    def fetch_rows(self, market: str) -> list[ArticleRow]:
        payload = self.client.select(
            self.table,
            filters={"market": f"eq.{market}"},
            order="business_bites_news_id.asc,rank.asc",
        )
        return [ArticleRow.from_mapping(item) for item in payload]

    def fetch_story(self, story_id: str) -> list[ArticleRow]:
        payload = self.client.select(
            self.table,
            filters={
                "or": f"(business_bites_news_id.eq.{story_id},news_analysis_id.eq.{story_id})"
            },
            order="published_at.desc",
        )
        return [ArticleRow.from_mapping(item) for item in payload]

    def distinct_values(self, column: str, market: str | None = None) -> list[str]:
        _check_column(column)
        filters = {column: "not.is.null"}
        if market is not None:
            filters["market"] = f"eq.{market}"
        payload = self.client.select(self.table, columns=column, filters=filters)
        return _distinct(item.get(column) for item in payload)


class StaticRowSource(RowSource):
    """Rows from a JSON array on disk, re-read on every call."""

    name = "static"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def fetch_rows(self, market: str) -> list[ArticleRow]:
        return [
            ArticleRow.from_mapping(item) for item in self._load() if item.get("market") == market
        ]

    def fetch_story(self, story_id: str) -> list[ArticleRow]:
        matches = [
            ArticleRow.from_mapping(item)
            for item in self._load()
            if _matches_story(item.get("business_bites_news_id"), story_id)
            or _matches_story(item.get("news_analysis_id"), story_id)
        ]
        return sorted(matches, key=lambda row: recency_key(row.published_at), reverse=True)

    def distinct_values(self, column: str, market: str | None = None) -> list[str]:
        _check_column(column)
        items = self._load()
        if market is not None:
            items = [item for item in items if item.get("market") == market]
        return _distinct(item.get(column) for item in items)

    def _load(self) -> list[dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InfrastructureError(
                f"Static dataset unavailable: {self.path}", backend=self.name
            ) from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InfrastructureError(
                f"Static dataset is not valid JSON: {self.path}", backend=self.name
            ) from exc
        if not isinstance(data, list):
            raise InfrastructureError(
                f"Static dataset must be a JSON array: {self.path}", backend=self.name
            )
        return [item for item in data if isinstance(item, dict)]


class SqliteRowSource(RowSource):
    name = "sqlite"

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    def fetch_rows(self, market: str) -> list[ArticleRow]:
        stmt = (
            select(BusinessBiteRecord)
            .where(BusinessBiteRecord.market == market)
            .order_by(
                BusinessBiteRecord.business_bites_news_id,
                BusinessBiteRecord.rank,
                BusinessBiteRecord.slno,
            )
        )
        return self._rows(stmt)

    def fetch_story(self, story_id: str) -> list[ArticleRow]:
        try:
            numeric_id = int(story_id)
        except ValueError:
            return []
        stmt = (
            select(BusinessBiteRecord)
            .where(
                or_(
                    BusinessBiteRecord.business_bites_news_id == numeric_id,
                    BusinessBiteRecord.news_analysis_id == numeric_id,
                )
            )
            .order_by(BusinessBiteRecord.published_at.desc(), BusinessBiteRecord.rank)
        )
        return self._rows(stmt)

    def distinct_values(self, column: str, market: str | None = None) -> list[str]:
        _check_column(column)
        attribute = getattr(BusinessBiteRecord, column)
        stmt = select(attribute).where(attribute.is_not(None)).distinct()
        if market is not None:
            stmt = stmt.where(BusinessBiteRecord.market == market)
        try:
            with self.session_factory() as session:
                values = session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"SQLite query failed: {exc}", backend=self.name) from exc
        return _distinct(values)

    def _rows(self, stmt) -> list[ArticleRow]:
        try:
            with self.session_factory() as session:
                records = session.execute(stmt).scalars().all()
                return [record_to_row(record) for record in records]
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"SQLite query failed: {exc}", backend=self.name) from exc


def record_to_row(record: BusinessBiteRecord) -> ArticleRow:
    return ArticleRow(
        business_bites_news_id=record.business_bites_news_id,
        news_analysis_id=record.news_analysis_id,
        title=record.title,
        summary=record.summary,
        summary_short=record.summary_short,
        market=record.market,
        sector=record.sector,
        impact_score=record.impact_score,
        sentiment=record.sentiment,
        link=record.link,
        url_to_image=record.url_to_image,
        thumbnail_url=record.thumbnail_url,
        published_at=record.published_at,
        source_system=record.source_system,
        author=record.author,
        alternative_sources=record.alternative_sources,
        rank=record.rank,
        slno=record.slno,
    )


def build_row_sources(
    settings: Settings, session_factory: Callable[[], Session] | None = None
) -> list[RowSource]:
    """Instantiate the configured backends once, in fallback order."""
    sources: list[RowSource] = []
    for name in settings.row_sources_list():
        if name == "supabase":
            if not settings.supabase_configured():
                logger.info("Supabase credentials not configured, skipping remote source")
                continue
            client = SupabaseClient(
                base_url=str(settings.supabase_url),
                api_key=settings.supabase_key or "",
                timeout=settings.supabase_timeout_seconds,
            )
            sources.append(SupabaseRowSource(client, table=settings.supabase_table))
        elif name == "static":
            sources.append(StaticRowSource(settings.static_data_path))
        elif name == "sqlite":
            if session_factory is None:
                from .db import get_session_factory

                session_factory = get_session_factory()
            sources.append(SqliteRowSource(session_factory))
    logger.info("Row sources in fallback order: %s", ", ".join(s.name for s in sources) or "none")
    return sources


def _check_column(column: str) -> None:
    if column not in DISTINCT_COLUMNS:
        raise ValueError(f"Unsupported column for distinct lookup: {column}")


def _matches_story(value: object, story_id: str) -> bool:
    return value is not None and str(value) == story_id


def _distinct(values: Iterable[object]) -> list[str]:
    return sorted({str(value) for value in values if value not in (None, "")})


__all__ = [
    "RowSource",
    "SupabaseRowSource",
    "StaticRowSource",
    "SqliteRowSource",
    "build_row_sources",
    "record_to_row",
]
