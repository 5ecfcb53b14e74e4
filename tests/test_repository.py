from __future__ import annotations

import pytest

from business_bites.db import session_scope
from business_bites.errors import NotFoundError, ValidationError
from business_bites.repository import add_bookmark, list_bookmarks, remove_bookmark


def _add(session, user_id="u1", article_id="10", **overrides):
    fields = {"title": "Story", "url": "https://news.example.com/story"}
    fields.update(overrides)
    return add_bookmark(session, user_id=user_id, article_id=article_id, **fields)


def test_add_and_list_newest_first():
    with session_scope() as session:
        _add(session, article_id="1")
        _add(session, article_id="2")
        _add(session, user_id="u2", article_id="3")

    with session_scope() as session:
        bookmarks = list_bookmarks(session, "u1")
        assert [b.article_id for b in bookmarks] == ["2", "1"]


def test_add_is_idempotent_and_updates_fields():
    with session_scope() as session:
        first, created = _add(session)
        assert created is True
    with session_scope() as session:
        second, created = _add(session, title="Updated title", sector="Energy")
        assert created is False
        assert second.id == first.id
        assert second.title == "Updated title"
        assert second.sector == "Energy"


def test_add_requires_fields():
    with session_scope() as session:
        with pytest.raises(ValidationError) as excinfo:
            add_bookmark(session, user_id="u1", article_id=None, title="", url="https://x")
    assert "article_id" in str(excinfo.value)
    assert "title" in str(excinfo.value)


def test_remove_bookmark():
    with session_scope() as session:
        _add(session)
    with session_scope() as session:
        assert remove_bookmark(session, "u1", 10) == 1
    with session_scope() as session:
        with pytest.raises(NotFoundError):
            remove_bookmark(session, "u1", "10")
        with pytest.raises(ValidationError):
            remove_bookmark(session, None, "10")


def test_list_requires_user():
    with session_scope() as session:
        with pytest.raises(ValidationError):
            list_bookmarks(session, "")
