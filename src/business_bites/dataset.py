"""Move ``business_bites_display`` rows between SQLite and the JSON export."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import BusinessBiteRecord
from .rows import ArticleRow
from .sources import record_to_row


logger = logging.getLogger(__name__)


def export_rows(session: Session, path: str | Path) -> int:
    """Write every stored row to ``path`` as a JSON array ordered by ``slno``."""
    records = session.execute(select(BusinessBiteRecord).order_by(BusinessBiteRecord.slno)).scalars()
    rows = [record_to_row(record).to_dict() for record in records]
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Exported %s rows to %s", len(rows), output)
    return len(rows)


def import_rows(session: Session, path: str | Path) -> int:
    """Load a JSON export into SQLite, replacing rows that share a ``slno``."""
    source = Path(path)
    data = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON array in {source}")

    loaded = 0
    for item in data:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object entry in %s", source)
            continue
        session.merge(row_to_record(ArticleRow.from_mapping(item)))
        loaded += 1
    session.flush()
    logger.info("Imported %s rows from %s", loaded, source)
    return loaded


def row_to_record(row: ArticleRow) -> BusinessBiteRecord:
    return BusinessBiteRecord(
        slno=row.slno,
        business_bites_news_id=_story_id(row, "business_bites_news_id"),
        news_analysis_id=_story_id(row, "news_analysis_id"),
        title=row.title,
        summary=row.summary,
        summary_short=row.summary_short,
        market=row.market,
        sector=row.sector,
        impact_score=row.impact_score,
        sentiment=row.sentiment,
        link=row.link,
        url_to_image=row.url_to_image,
        thumbnail_url=row.thumbnail_url,
        published_at=row.published_at,
        source_system=row.source_system,
        author=row.author,
        alternative_sources=row.alternative_sources,
        rank=row.rank,
    )


def _story_id(row: ArticleRow, field: str) -> int | None:
    """Integer story id for the SQLite schema."""
    value = getattr(row, field)
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    raise ValueError(f"Row slno={row.slno} has a non-integer {field}: {value!r}")


__all__ = ["export_rows", "import_rows", "row_to_record"]
