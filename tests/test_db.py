from __future__ import annotations

import inspect

import pytest
from sqlalchemy import func, select

from business_bites.db import session_scope
from business_bites.models import ReadLaterBookmark


def _count() -> int:
    with session_scope() as session:
        return session.execute(select(func.count(ReadLaterBookmark.id))).scalar_one()


def test_session_scope_uses_shared_factory():
    assert list(inspect.signature(session_scope).parameters) == []


def test_session_scope_commits_and_rolls_back():
    with session_scope() as session:
        session.add(ReadLaterBookmark(user_id="u1", article_id="1", title="t", url="https://a"))
    assert _count() == 1

    with pytest.raises(RuntimeError):
        with session_scope() as session:
            session.add(ReadLaterBookmark(user_id="u1", article_id="2", title="t", url="https://b"))
            session.flush()
            raise RuntimeError("boom")
    assert _count() == 1
