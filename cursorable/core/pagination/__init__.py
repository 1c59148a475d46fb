"""Cursor-based (keyset) pagination with Connection and REST styles.

Pagination here is:
- Stable: pages don't shift when rows are inserted between requests
- Performant: indexed seeks instead of OFFSET scans
- Bidirectional: ``first``/``after`` forward, ``last``/``before`` backward

Setup (once per entity):
    registry = SortKeyRegistry(
        {
            "newest": [desc("created_at", reversible=True), asc("id")],
            "title": [asc("title", reversible=True), asc("id")],
        }
    )
    article_paginator = BaseRepository(Article).paginator(registry)

Connection style:
    @router.get("/articles", response_model=Connection[ArticleResponse])
    async def list_articles(session: DbSession, pagination: CursorPagination):
        connection = await article_paginator.get_connection(session, pagination)
        return connection.map_nodes(ArticleResponse.model_validate)

Simple REST style:
    @router.get("/articles", response_model=CursorPage[ArticleResponse])
    async def list_articles(...):
        connection = await article_paginator.get_connection(session, pagination)
        return connection.map_nodes(ArticleResponse.model_validate).to_cursor_page()

Cursors are opaque base64url strings that clients pass back unchanged.
A cursor is only valid for the sort key it was issued under.
"""

from cursorable.core.pagination.cursor import CURSOR_VERSION, CursorCodec, CursorData
from cursorable.core.pagination.exceptions import (
    CursorDecodeError,
    CursorEncodeError,
    CursorMismatchError,
    PaginationError,
    SortKeyConfigError,
    UnknownSortKeyError,
)
from cursorable.core.pagination.filters import CursorFilter, CursorQuery, CursorQueryAssembler
from cursorable.core.pagination.paginator import CursorPaginator
from cursorable.core.pagination.request import PaginationRequest, ResolvedRequest
from cursorable.core.pagination.schemas import (
    Connection,
    CursorPage,
    Edge,
    PageInfo,
)
from cursorable.core.pagination.sort_keys import SortColumn, SortKey, SortKeyRegistry, asc, desc

__all__ = [
    "CURSOR_VERSION",
    # Schemas
    "Connection",
    # Cursor codec
    "CursorCodec",
    "CursorData",
    # Errors
    "CursorDecodeError",
    "CursorEncodeError",
    # Query assembly
    "CursorFilter",
    "CursorMismatchError",
    "CursorPage",
    # Engine
    "CursorPaginator",
    "CursorQuery",
    "CursorQueryAssembler",
    "Edge",
    "PageInfo",
    "PaginationError",
    "PaginationRequest",
    "ResolvedRequest",
    # Sort keys
    "SortColumn",
    "SortKey",
    "SortKeyConfigError",
    "SortKeyRegistry",
    "UnknownSortKeyError",
    "asc",
    "desc",
]
