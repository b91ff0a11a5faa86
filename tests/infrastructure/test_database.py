"""Tests for the SQLAlchemy Core table finder."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, insert
from sqlalchemy.engine import Engine

from lazyfrag.domain.references import LookupNotFound
from lazyfrag.infrastructure.database import TableFinder
from lazyfrag.infrastructure.locator import EntityCodec, Locator
from lazyfrag.infrastructure.signing import MessageVerifier
from tests.conftest import SECRET
from tests.entities import Post

metadata = MetaData()

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String, nullable=False),
)

tags = Table(
    "tags",
    metadata,
    Column("post_id", Integer, primary_key=True),
    Column("name", String, primary_key=True),
)


@pytest.fixture
def engine() -> Generator[Engine]:
    """In-memory SQLite engine with two posts."""
    eng = create_engine("sqlite://")
    metadata.create_all(eng)
    with eng.begin() as conn:
        conn.execute(insert(posts), [{"id": 1, "title": "First"}, {"id": 2, "title": "Second"}])
    try:
        yield eng
    finally:
        eng.dispose()


class TestTableFinder:
    def test_finds_row(self, engine: Engine) -> None:
        finder = TableFinder(engine, posts, Post)
        assert finder("1") == Post(id=1, title="First")

    def test_missing_row(self, engine: Engine) -> None:
        assert TableFinder(engine, posts, Post)("99") is None

    def test_non_numeric_id(self, engine: Engine) -> None:
        assert TableFinder(engine, posts, Post)("abc") is None

    def test_explicit_key(self, engine: Engine) -> None:
        finder = TableFinder(engine, posts, Post, key="title")
        assert finder("Second") == Post(id=2, title="Second")

    def test_composite_key_requires_explicit_key(self, engine: Engine) -> None:
        with pytest.raises(ValueError, match="primary-key"):
            TableFinder(engine, tags, dict)

    def test_with_codec(self, engine: Engine) -> None:
        locator = Locator()
        locator.register(Post, TableFinder(engine, posts, Post))
        codec = EntityCodec(app="dummy", locator=locator, verifier=MessageVerifier(SECRET))
        assert codec.decode("gid://dummy/Post/2") == Post(id=2, title="Second")
        assert isinstance(codec.decode("gid://dummy/Post/3"), LookupNotFound)
