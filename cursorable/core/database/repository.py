"""Minimal generic repository for SQLAlchemy models.

The repository is the base read-query capability that pagination builds on:
it owns the model, the base ``select()`` statement and the count query.
Cursor pagination is composed on top of it (``CursorPaginator`` holds a
repository) rather than mixed into it.

Example:
    from cursorable.core.database import BaseRepository
    from cursorable.core.pagination import CursorPaginator, SortKeyRegistry, asc, desc

    article_repo = BaseRepository(Article)
    article_pages = article_repo.paginator(
        SortKeyRegistry({"newest": [desc("created_at", reversible=True), asc("id")]})
    )

    connection = await article_pages.get_connection(session, PaginationRequest(first=20))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import Select, func, select

from cursorable.core.database.exceptions import NotFoundError
from cursorable.core.database.filters import as_clause
from cursorable.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from cursorable.core.pagination.cursor import CursorCodec
    from cursorable.core.pagination.paginator import CursorPaginator
    from cursorable.core.pagination.sort_keys import SortKeyRegistry
    from cursorable.core.settings.pagination import PaginationSettings


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Minimal generic repository.

    Provides:
        - select() -> Select (base statement for reads)
        - get(session, id) -> T | None
        - get_or_raise(session, id) -> T (raises NotFoundError)
        - count(session, statement, where) -> int
        - create_many(session, instances) -> Sequence[T]
        - paginator(registry, ...) -> CursorPaginator[T]

    Session is always explicit - no hidden state.
    """

    __slots__ = ("_lazy", "_logger", "model")

    def __init__(self, model: type[T]) -> None:
        """Initialize repository with model class.

        Args:
            model: SQLAlchemy model class (e.g., Article)
        """
        self.model = model
        # Standard logger for INFO/WARNING/ERROR
        self._logger = logging.getLogger(f"cursorable.repository.{model.__name__}")
        # Lazy logger for DEBUG (zero overhead when DEBUG disabled)
        self._lazy = get_lazy_logger(f"cursorable.repository.{model.__name__}")

    def select(self) -> Select[tuple[T]]:
        """Base statement every read starts from."""
        return select(self.model)

    async def get(self, session: AsyncSession, id: Any) -> T | None:  # noqa: A002
        """Get entity by primary key."""
        instance = await session.get(self.model, id)
        self._lazy.debug(
            lambda: f"db.get: {self.model.__name__}({id}) -> {'found' if instance else 'not found'}"
        )
        return instance

    async def get_or_raise(self, session: AsyncSession, id: Any) -> T:  # noqa: A002
        """Get entity by primary key or raise NotFoundError.

        Raises:
            NotFoundError: If entity doesn't exist
        """
        instance = await self.get(session, id)
        if instance is None:
            self._logger.info(
                "Entity not found",
                extra={
                    "entity": self.model.__name__,
                    "id": str(id),
                    "operation": "db.get_or_raise",
                },
            )
            raise NotFoundError(self.model.__name__, {"id": id})
        return instance

    async def count(
        self,
        session: AsyncSession,
        statement: Select[Any] | None = None,
        *,
        where: Any = None,
    ) -> int:
        """Count rows of a statement.

        Args:
            session: Database session
            statement: Base statement (defaults to ``select()``)
            where: Extra filter (expression, StatementFilter, or list of those)

        Returns:
            Number of matching rows
        """
        statement = statement if statement is not None else self.select()
        condition = as_clause(where)
        if condition is not None:
            statement = statement.where(condition)

        count_stmt = select(func.count()).select_from(statement.order_by(None).subquery())
        total = (await session.execute(count_stmt)).scalar_one()

        self._lazy.debug(lambda: f"db.count: {self.model.__name__} -> {total}")
        return total

    async def create_many(self, session: AsyncSession, instances: Iterable[T]) -> Sequence[T]:
        """Persist multiple entities.

        Args:
            session: Database session
            instances: Entity instances to persist

        Returns:
            Sequence of persisted entities with generated fields populated
        """
        instances_list = list(instances)
        session.add_all(instances_list)
        await session.flush()
        for instance in instances_list:
            await session.refresh(instance)

        self._lazy.debug(
            lambda: f"db.create_many: {self.model.__name__} -> {len(instances_list)} created"
        )
        return instances_list

    def paginator(
        self,
        registry: SortKeyRegistry,
        *,
        settings: PaginationSettings | None = None,
        codec: CursorCodec | None = None,
        **overrides: Any,
    ) -> CursorPaginator[T]:
        """Build a cursor paginator over this repository.

        Args:
            registry: Sort keys for the model
            settings: Pagination settings (defaults to the cached settings)
            codec: Cursor codec (defaults to one built from settings)
            **overrides: ``default_limit``, ``max_limit``, ``over_fetch`` or ``admin``
        """
        from cursorable.core.pagination.paginator import CursorPaginator

        return CursorPaginator(self, registry, settings=settings, codec=codec, **overrides)


__all__ = ["BaseRepository"]
