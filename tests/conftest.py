"""Pytest fixtures for the Business Bites project."""

from __future__ import annotations

import json
from typing import Iterator

import pytest

from business_bites.config import get_settings
from business_bites.db import init_db, reset_engine


SAMPLE_ROWS = [
    {
        "slno": 1,
        "business_bites_news_id": 10,
        "title": "Chipmaker beats estimates",
        "summary": "Quarterly revenue up on AI demand",
        "market": "US",
        "sector": "Technology",
        "impact_score": 8.0,
        "sentiment": "positive",
        "link": "https://news.example.com/chip-1",
        "urlToImage": "https://img.example.com/chip.png",
        "published_at": "2024-01-02T09:00:00Z",
        "source_system": "Reuters",
        "author": "A. Writer",
        "rank": 1,
    },
    {
        "slno": 2,
        "business_bites_news_id": 10,
        "title": "Chip stocks rally after results",
        "summary": "Shares climb",
        "market": "US",
        "sector": "Technology",
        "impact_score": 7.0,
        "link": "https://other.example.com/chip-2",
        "published_at": "2024-01-02T10:00:00Z",
        "source_system": "Bloomberg",
        "rank": 2,
    },
    {
        "slno": 3,
        "business_bites_news_id": 11,
        "title": "Oil prices slip",
        "summary": "Brent falls on supply news",
        "market": "US",
        "sector": "Energy",
        "impact_score": 5.0,
        "link": "https://news.example.com/oil",
        "published_at": "2024-01-03T08:00:00Z",
        "source_system": "CNBC",
        "rank": 1,
    },
    {
        "slno": 4,
        "business_bites_news_id": 20,
        "title": "Yuan steadies",
        "summary": "Central bank fixing",
        "market": "CHINA",
        "sector": "Finance",
        "impact_score": 6.0,
        "link": "https://news.example.com/yuan",
        "published_at": "2024-01-03T02:00:00Z",
        "source_system": "Caixin",
        "rank": 1,
    },
]


@pytest.fixture(autouse=True)
def configure_environment(tmp_path, monkeypatch) -> Iterator[None]:
    env_vars = {
        "SQLITE_PATH": str(tmp_path / "test.db"),
        "STATIC_DATA_PATH": str(tmp_path / "business_bites_display.json"),
        "ROW_SOURCES": "static,sqlite",
        "DEFAULT_MARKET": "US",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)

    get_settings.cache_clear()
    reset_engine()
    init_db(seed=False)
    yield
    get_settings.cache_clear()
    reset_engine()


@pytest.fixture
def sample_rows() -> list[dict]:
    return [dict(row) for row in SAMPLE_ROWS]


@pytest.fixture
def static_file(tmp_path, sample_rows):
    path = tmp_path / "business_bites_display.json"
    path.write_text(json.dumps(sample_rows), encoding="utf-8")
    return path
