"""Cursor paginator: runs page queries and assembles connections.

Flow for one request:
    1. CursorQueryAssembler resolves the sort key, decodes the cursor and
       builds WHERE / ORDER BY / LIMIT (limit = page size + 1)
    2. The page query runs on the caller's session
    3. The extra row, if any, is dropped and marks the far edge
       (has_next_page forward, has_previous_page backward)
    4. A cursor in the request marks the near edge
    5. Backward pages are flipped back into natural order
    6. Edge cursors are encoded from the sort key columns of each node
    7. Optionally, a COUNT(*) with the caller filter only

Both queries run on the same session, so on a transactional backend they
see the same snapshot when the caller wraps them in one transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

from cursorable.core.pagination.cursor import CursorCodec
from cursorable.core.pagination.filters import CursorQuery, CursorQueryAssembler
from cursorable.core.pagination.schemas import Connection, Edge, PageInfo
from cursorable.core.settings import get_pagination_settings
from cursorable.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from cursorable.core.database.repository import BaseRepository
    from cursorable.core.pagination.request import PaginationRequest
    from cursorable.core.pagination.sort_keys import SortKey, SortKeyRegistry
    from cursorable.core.settings.pagination import PaginationSettings


T = TypeVar("T")


class CursorPaginator(Generic[T]):
    """Cursor pagination over one repository.

    The paginator holds a repository (for the model and its base
    statement), the model's sort keys and page size limits. It keeps no
    per-request state, so one instance is shared by all requests.

    Example:
        paginator = CursorPaginator(
            BaseRepository(Article),
            SortKeyRegistry({"newest": [desc("created_at", reversible=True), asc("id")]}),
            max_limit=50,
        )

        page = await paginator.get_connection(session, PaginationRequest(first=20))
        more = await paginator.get_connection(
            session, PaginationRequest(first=20, after=page.page_info.end_cursor)
        )
    """

    __slots__ = ("_lazy", "assembler", "codec", "registry", "repository")

    def __init__(
        self,
        repository: BaseRepository[T],
        registry: SortKeyRegistry,
        *,
        settings: PaginationSettings | None = None,
        codec: CursorCodec | None = None,
        default_limit: int | None = None,
        max_limit: int | None = None,
        over_fetch: bool | None = None,
        admin: bool = False,
    ) -> None:
        """Initialize paginator.

        Args:
            repository: Repository providing the model and base statement
            registry: Sort keys available for this model
            settings: Pagination settings (defaults to cached settings)
            codec: Cursor codec (defaults to one signed with settings.cursor_secret)
            default_limit: Page size when the request gives none
            max_limit: Largest page size; bigger requests are clamped
            over_fetch: Fetch one extra row to detect further pages
            admin: Use settings.admin_max_limit as the default maximum

        Raises:
            SortKeyConfigError: If a sort key names a column the model lacks
        """
        settings = settings or get_pagination_settings()
        self.repository = repository
        self.registry = registry
        self.codec = codec or CursorCodec(secret=settings.cursor_key)
        self.assembler = CursorQueryAssembler(
            repository.model,
            registry,
            self.codec,
            default_limit=default_limit if default_limit is not None else settings.default_limit,
            max_limit=max_limit if max_limit is not None else _max_limit(settings, admin=admin),
            over_fetch=over_fetch if over_fetch is not None else settings.over_fetch,
        )
        name = repository.model.__name__
        self._lazy = get_lazy_logger(f"cursorable.pagination.{name}")

    @property
    def model(self) -> type[T]:
        return self.repository.model

    def build_query(self, request: PaginationRequest) -> CursorQuery:
        """Resolve a request into a page query without running it.

        Raises:
            UnknownSortKeyError: If the sort key is not registered
            CursorDecodeError: If the cursor is malformed
            CursorMismatchError: If the cursor belongs to another sort key
        """
        return self.assembler.build(request)

    def build_statement(
        self,
        request: PaginationRequest,
        statement: Select[Any] | None = None,
    ) -> Select[Any]:
        """Page query as a SQLAlchemy statement.

        Args:
            request: Pagination parameters
            statement: Base statement (defaults to the repository's ``select()``)
        """
        return self.build_query(request).apply(self._base(statement))

    async def fetch(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        statement: Select[Any] | None = None,
    ) -> list[T]:
        """Run the page query and return raw rows in scan order.

        Rows include the over-fetched extra row and, for backward requests,
        are in reversed order. Use ``get_connection`` for a finished page.
        """
        query = self.build_query(request)
        return await self._execute(session, query, statement)

    async def get_lazy_connection(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        statement: Select[Any] | None = None,
    ) -> Connection[T]:
        """Fetch one page without a total count.

        ``include_total_count`` on the request is ignored here.
        """
        query = self.build_query(request)
        rows = await self._execute(session, query, statement)
        return self._assemble(query, rows)

    async def get_connection(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        statement: Select[Any] | None = None,
    ) -> Connection[T]:
        """Fetch one page, plus the total count when requested.

        Args:
            session: Database session
            request: Pagination parameters
            statement: Base statement (defaults to the repository's ``select()``);
                must select the model entity and should not be limited

        Returns:
            Connection with nodes in natural order

        Raises:
            UnknownSortKeyError: If the sort key is not registered
            CursorDecodeError: If the cursor is malformed
            CursorMismatchError: If the cursor belongs to another sort key
        """
        query = self.build_query(request)
        rows = await self._execute(session, query, statement)
        connection = self._assemble(query, rows)

        if request.include_total_count:
            connection.total_count = await self._count(session, query, statement)

        return connection

    async def count(
        self,
        session: AsyncSession,
        request: PaginationRequest,
        statement: Select[Any] | None = None,
    ) -> int:
        """Count rows matching the request's caller filter (cursor ignored)."""
        return await self._count(session, self.build_query(request), statement)

    def make_cursor(self, row: Any, sort_key: str | SortKey | None = None) -> str:
        """Encode a cursor pointing at ``row`` for a sort key.

        Args:
            row: Model instance or mapping with the sort key columns
            sort_key: Sort key or its name (None -> default)
        """
        key = sort_key if not isinstance(sort_key, str | None) else self.registry.resolve(sort_key)
        return self.codec.from_row(row, key.column_names, not_null=key.not_null_columns)

    def _base(self, statement: Select[Any] | None) -> Select[Any]:
        return statement if statement is not None else self.repository.select()

    async def _execute(
        self,
        session: AsyncSession,
        query: CursorQuery,
        statement: Select[Any] | None,
    ) -> list[T]:
        result = await session.execute(query.apply(self._base(statement)))
        rows = list(result.scalars().all())
        self._lazy.debug(
            lambda: f"pagination.fetch: {self.model.__name__}(limit={query.limit}) -> {len(rows)} rows"
        )
        return rows

    async def _count(
        self,
        session: AsyncSession,
        query: CursorQuery,
        statement: Select[Any] | None,
    ) -> int:
        return await self.repository.count(session, query.apply_count_filter(self._base(statement)))

    def _assemble(self, query: CursorQuery, rows: Sequence[T]) -> Connection[T]:
        request = query.request
        nodes = list(rows)
        has_next_page = False
        has_previous_page = False

        # Far edge: the over-fetched row proves another page exists
        if query.over_fetch and len(nodes) > request.count:
            nodes = nodes[: request.count]
            if request.is_backward:
                has_previous_page = True
            else:
                has_next_page = True

        # Near edge: a cursor implies rows on that side (not verified)
        if request.cursor is not None:
            if request.is_backward:
                has_next_page = True
            else:
                has_previous_page = True

        if request.is_backward:
            nodes.reverse()

        columns = query.sort_key.column_names
        not_null = query.sort_key.not_null_columns
        edges = [
            Edge(node=node, cursor=self.codec.from_row(node, columns, not_null=not_null))
            for node in nodes
        ]

        page_info = PageInfo(
            has_previous_page=has_previous_page,
            has_next_page=has_next_page,
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )

        self._lazy.debug(
            lambda: f"pagination.page: {self.model.__name__}(sort={query.sort_key.name}, "
            f"direction={request.direction}) -> {len(edges)} items, "
            f"has_next={has_next_page}, has_prev={has_previous_page}"
        )
        return Connection(edges=edges, page_info=page_info)


def _max_limit(settings: PaginationSettings, *, admin: bool) -> int:
    return settings.admin_max_limit if admin else settings.max_limit


__all__ = ["CursorPaginator"]
