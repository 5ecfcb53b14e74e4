from __future__ import annotations

import json

import pytest
import requests

from business_bites.config import get_settings
from business_bites.dataset import import_rows
from business_bites.db import get_session_factory, session_scope
from business_bites.errors import InfrastructureError
from business_bites.sources import (
    SqliteRowSource,
    StaticRowSource,
    SupabaseRowSource,
    build_row_sources,
)
from business_bites.supabase_client import SupabaseClient


class _DummyResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def sqlite_source(static_file):
    with session_scope() as session:
        import_rows(session, static_file)
    return SqliteRowSource(get_session_factory())


def test_static_source_filters_by_exact_market(static_file):
    source = StaticRowSource(static_file)
    rows = source.fetch_rows("US")
    assert [row.slno for row in rows] == [1, 2, 3]
    assert source.fetch_rows("us") == []


def test_static_source_story_lookup_newest_first(static_file):
    rows = StaticRowSource(static_file).fetch_story("10")
    assert [row.slno for row in rows] == [2, 1]


def test_static_source_distinct_values(static_file):
    source = StaticRowSource(static_file)
    assert source.distinct_values("market") == ["CHINA", "US"]
    assert source.distinct_values("sector", market="US") == ["Energy", "Technology"]
    with pytest.raises(ValueError):
        source.distinct_values("title")


def test_static_source_missing_or_malformed_file(tmp_path):
    with pytest.raises(InfrastructureError):
        StaticRowSource(tmp_path / "missing.json").fetch_rows("US")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(InfrastructureError):
        StaticRowSource(broken).fetch_rows("US")
    not_a_list = tmp_path / "object.json"
    not_a_list.write_text(json.dumps({"rows": []}), encoding="utf-8")
    with pytest.raises(InfrastructureError):
        StaticRowSource(not_a_list).fetch_rows("US")


def test_sqlite_source_orders_by_story_then_rank(sqlite_source):
    rows = sqlite_source.fetch_rows("US")
    assert [(row.business_bites_news_id, row.rank) for row in rows] == [(10, 1), (10, 2), (11, 1)]
    assert rows[0].url_to_image == "https://img.example.com/chip.png"


def test_sqlite_source_story_and_distinct(sqlite_source):
    assert [row.slno for row in sqlite_source.fetch_story("10")] == [2, 1]
    assert sqlite_source.fetch_story("abc") == []
    assert sqlite_source.distinct_values("market") == ["CHINA", "US"]


def test_supabase_source_builds_postgrest_query(monkeypatch, sample_rows):
    captured = {}

    def fake_get(url, headers=None, params=None, timeout=None):
        captured.update(url=url, headers=headers, params=params, timeout=timeout)
        return _DummyResponse(sample_rows[:3])

    monkeypatch.setattr("business_bites.supabase_client.requests.get", fake_get)
    client = SupabaseClient(base_url="https://proj.supabase.co/", api_key="secret", timeout=5)
    rows = SupabaseRowSource(client).fetch_rows("US")

    assert len(rows) == 3
    assert captured["url"] == "https://proj.supabase.co/rest/v1/business_bites_display"
    assert captured["params"]["market"] == "eq.US"
    assert captured["params"]["order"] == "business_bites_news_id.asc,rank.asc"
    assert captured["headers"]["apikey"] == "secret"
    assert captured["headers"]["Authorization"] == "Bearer secret"
    assert captured["timeout"] == 5


def test_supabase_source_wraps_request_errors(monkeypatch):
    def raise_timeout(*_, **__):
        raise requests.exceptions.ReadTimeout("mock timeout")

    monkeypatch.setattr("business_bites.supabase_client.requests.get", raise_timeout)
    source = SupabaseRowSource(SupabaseClient(base_url="https://x.supabase.co", api_key="k"))
    with pytest.raises(InfrastructureError) as excinfo:
        source.fetch_rows("US")
    assert excinfo.value.backend == "supabase"


def test_supabase_source_rejects_unexpected_payload(monkeypatch):
    monkeypatch.setattr(
        "business_bites.supabase_client.requests.get",
        lambda *args, **kwargs: _DummyResponse({"message": "nope"}),
    )
    source = SupabaseRowSource(SupabaseClient(base_url="https://x.supabase.co", api_key="k"))
    with pytest.raises(InfrastructureError):
        source.fetch_rows("US")


def test_build_row_sources_skips_unconfigured_supabase(monkeypatch):
    monkeypatch.setenv("ROW_SOURCES", "supabase,static,sqlite")
    get_settings.cache_clear()
    names = [source.name for source in build_row_sources(get_settings())]
    assert names == ["static", "sqlite"]


def test_build_row_sources_with_supabase(monkeypatch):
    monkeypatch.setenv("ROW_SOURCES", "sqlite,supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "key")
    get_settings.cache_clear()
    names = [source.name for source in build_row_sources(get_settings())]
    assert names == ["sqlite", "supabase"]
