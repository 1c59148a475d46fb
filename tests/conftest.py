"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated settings instances
    - Database Fixtures: SQLAlchemy engine and session (in-memory SQLite)
    - Pagination Fixtures: sort key registries, paginators and seed data
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Coroutine, Iterator
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cursorable.core.database import Base, BaseRepository
from cursorable.core.pagination import CursorPaginator, SortKeyRegistry, asc, desc
from cursorable.core.settings import PaginationSettings, clear_settings_cache
from tests.models import Article, Tag

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

BASE_TIME = datetime(2023, 1, 1, 12, 0, 0)

SeedArticles = Callable[..., Coroutine[Any, Any, list[Article]]]


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep PAGINATION_/LOG_ variables from the host out of the tests."""
    for name in (
        "PAGINATION_DEFAULT_LIMIT",
        "PAGINATION_MAX_LIMIT",
        "PAGINATION_ADMIN_MAX_LIMIT",
        "PAGINATION_OVER_FETCH",
        "PAGINATION_CURSOR_SECRET",
        "LOG_LEVEL",
        "LOG_JSON_FORMAT",
        "LOG_CONSOLE_ENABLED",
        "LOG_PAGINATION_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def pagination_settings() -> PaginationSettings:
    """Pagination settings with small limits and no signing."""
    return PaginationSettings(default_limit=10, max_limit=50, _env_file=None)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite.

    Yields:
        Async SQLAlchemy engine connected to in-memory SQLite.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create async database session with automatic table creation and cleanup.

    Yields:
        Async database session for testing.
    """
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ============================================================================
# Pagination Fixtures
# ============================================================================


@pytest.fixture
def article_registry() -> SortKeyRegistry:
    """Sort keys for Article; "newest" is the default."""
    return SortKeyRegistry(
        {
            "newest": [desc("created_at", reversible=True), asc("id")],
            "title": [asc("title", reversible=True), asc("id")],
            "rating": [desc("rating", reversible=True, nulls="last"), asc("id")],
        }
    )


@pytest.fixture
def article_repository() -> BaseRepository[Article]:
    return BaseRepository(Article)


@pytest.fixture
def article_paginator(
    article_repository: BaseRepository[Article],
    article_registry: SortKeyRegistry,
    pagination_settings: PaginationSettings,
) -> CursorPaginator[Article]:
    return article_repository.paginator(article_registry, settings=pagination_settings)


@pytest.fixture
def tag_paginator(pagination_settings: PaginationSettings) -> CursorPaginator[Tag]:
    registry = SortKeyRegistry({"score": [desc("score", reversible=True), asc("id")]})
    return BaseRepository(Tag).paginator(registry, settings=pagination_settings)


@pytest.fixture
def seed_articles(
    db_session: AsyncSession,
    article_repository: BaseRepository[Article],
) -> SeedArticles:
    """Insert articles one day apart, starting at 2023-01-01.

    Example:
        articles = await seed_articles(5)
        articles = await seed_articles(3, titles=["b", "a", "c"])
    """

    async def _seed(
        count: int,
        *,
        titles: list[str] | None = None,
        statuses: list[str] | None = None,
        ratings: list[int | None] | None = None,
    ) -> list[Article]:
        articles = [
            Article(
                title=titles[i] if titles else f"Article {i + 1}",
                status=statuses[i] if statuses else "published",
                rating=ratings[i] if ratings else None,
                created_at=BASE_TIME + timedelta(days=i),
            )
            for i in range(count)
        ]
        return list(await article_repository.create_many(db_session, articles))

    return _seed
