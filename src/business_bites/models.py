"""ORM models for stored entities."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class BusinessBiteRecord(Base):
    __tablename__ = "business_bites_display"
    __table_args__ = (
        Index("ix_business_bites_market", "market"),
        Index("ix_business_bites_news_id_rank", "business_bites_news_id", "rank"),
    )

    slno: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_bites_news_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    news_analysis_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str | None] = mapped_column(Text(), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text(), nullable=True)
    summary_short: Mapped[str | None] = mapped_column(Text(), nullable=True)
    market: Mapped[str | None] = mapped_column(String(64), nullable=True)
    sector: Mapped[str | None] = mapped_column(String(128), nullable=True)
    impact_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    sentiment: Mapped[str | None] = mapped_column(String(64), nullable=True)
    link: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    url_to_image: Mapped[str | None] = mapped_column("urlToImage", String(2048), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    published_at: Mapped[str | None] = mapped_column(String(64), nullable=True)
    source_system: Mapped[str | None] = mapped_column(String(256), nullable=True)
    author: Mapped[str | None] = mapped_column(String(512), nullable=True)
    alternative_sources: Mapped[str | None] = mapped_column(Text(), nullable=True)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)


class ReadLaterBookmark(Base):
    __tablename__ = "read_later"
    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_read_later_user_article"),
        Index("ix_read_later_user_added", "user_id", "added_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    article_id: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(String(1024), nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(128), nullable=True)
    source_system: Mapped[str | None] = mapped_column(String(256), nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "article_id": self.article_id,
            "title": self.title,
            "url": self.url,
            "sector": self.sector,
            "source_system": self.source_system,
            "added_at": self.added_at.isoformat() if self.added_at else None,
        }


__all__ = ["BusinessBiteRecord", "ReadLaterBookmark"]
