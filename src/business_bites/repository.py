"""Repository utilities for read-later bookmarks."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .errors import NotFoundError, ValidationError
from .models import ReadLaterBookmark


REQUIRED_FIELDS = ("user_id", "article_id", "title", "url")
_UPDATABLE_FIELDS = ("title", "url", "sector", "source_system")


def list_bookmarks(session: Session, user_id: str) -> Sequence[ReadLaterBookmark]:
    if not user_id:
        raise ValidationError("user_id parameter required")
    stmt = (
        select(ReadLaterBookmark)
        .where(ReadLaterBookmark.user_id == user_id)
        .order_by(ReadLaterBookmark.added_at.desc(), ReadLaterBookmark.id.desc())
    )
    return list(session.execute(stmt).scalars())


def add_bookmark(
    session: Session,
    *,
    user_id: str | None,
    article_id: object,
    title: str | None,
    url: str | None,
    sector: str | None = None,
    source_system: str | None = None,
) -> tuple[ReadLaterBookmark, bool]:
    """Save a bookmark, returning it with a flag telling whether it was newly created."""
    values = {"user_id": user_id, "article_id": article_id, "title": title, "url": url}
    missing = [name for name in REQUIRED_FIELDS if values[name] in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    article_key = str(article_id)
    existing = session.execute(
        select(ReadLaterBookmark).where(
            ReadLaterBookmark.user_id == user_id,
            ReadLaterBookmark.article_id == article_key,
        )
    ).scalar_one_or_none()

    incoming = {"title": title, "url": url, "sector": sector, "source_system": source_system}
    if existing is not None:
        for field in _UPDATABLE_FIELDS:
            new_value = incoming[field]
            if new_value is not None and new_value != getattr(existing, field):
                setattr(existing, field, new_value)
        session.flush()
        return existing, False

    bookmark = ReadLaterBookmark(
        user_id=user_id,
        article_id=article_key,
        title=title,
        url=url,
        sector=sector,
        source_system=source_system,
        added_at=datetime.utcnow(),
    )
    session.add(bookmark)
    session.flush()
    return bookmark, True


def remove_bookmark(session: Session, user_id: str | None, article_id: object) -> int:
    if not user_id or article_id in (None, ""):
        raise ValidationError("Missing article_id or user_id")
    stmt = delete(ReadLaterBookmark).where(
        ReadLaterBookmark.user_id == user_id,
        ReadLaterBookmark.article_id == str(article_id),
    )
    result = session.execute(stmt)
    session.flush()
    removed = result.rowcount or 0
    if not removed:
        raise NotFoundError("Bookmark not found", identifier=str(article_id))
    return removed


__all__ = ["list_bookmarks", "add_bookmark", "remove_bookmark"]
