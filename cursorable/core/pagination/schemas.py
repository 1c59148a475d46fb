"""Pagination response schemas for cursor-based pagination.

Two shapes are provided:

1. Connection (Relay style):
   - edges with a node and its cursor
   - PageInfo with navigation metadata
   - optional total count

2. CursorPage (simple REST style):
   - just items, next/prev cursors and a has_more flag

Both are built from the same paginator result; ``Connection.to_cursor_page()``
converts between them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")
U = TypeVar("U")


class PageInfo(BaseModel):
    """Pagination metadata following the Relay connection specification.

    Attributes:
        has_previous_page: Whether there are items before the current page
        has_next_page: Whether there are items after the current page
        start_cursor: Cursor of the first item in this page
        end_cursor: Cursor of the last item in this page
    """

    has_previous_page: bool = Field(
        default=False,
        description="Whether previous items exist",
    )
    has_next_page: bool = Field(
        default=False,
        description="Whether more items exist",
    )
    start_cursor: str | None = Field(
        default=None,
        description="Cursor of the first item",
    )
    end_cursor: str | None = Field(
        default=None,
        description="Cursor of the last item",
    )


class Edge(BaseModel, Generic[T]):
    """Edge wrapper for paginated items.

    Attributes:
        node: The actual data item
        cursor: Cursor pointing at this item
    """

    node: T = Field(description="The data item")
    cursor: str = Field(description="Cursor for this item")


class Connection(BaseModel, Generic[T]):
    """Connection pattern for cursor pagination.

    Nodes are always in natural order: for a backward page the rows are
    scanned in reverse and flipped back before the connection is built.

    Usage:
        @router.get("/articles", response_model=Connection[ArticleResponse])
        async def list_articles(session: DbSession, pagination: CursorPagination):
            connection = await article_paginator.get_connection(session, pagination)
            return connection.map_nodes(ArticleResponse.model_validate)

    Client navigation:
        GET /articles?first=10
        GET /articles?first=10&after=<end_cursor>
        GET /articles?last=10&before=<start_cursor>

    Attributes:
        edges: Items with their cursors
        page_info: Navigation metadata
        total_count: Rows matching the caller filter (only when requested)
    """

    edges: list[Edge[T]] = Field(
        default_factory=list,
        description="List of edges (items with cursors)",
    )
    page_info: PageInfo = Field(
        default_factory=PageInfo,
        description="Pagination metadata",
    )
    total_count: int | None = Field(
        default=None,
        description="Total count (optional)",
    )

    @property
    def nodes(self) -> list[T]:
        """Get just the nodes without edge wrappers."""
        return [edge.node for edge in self.edges]

    def map_nodes(self, func: Callable[[T], U]) -> Connection[U]:
        """Convert every node, keeping cursors and page info.

        Example:
            connection.map_nodes(ArticleResponse.model_validate)
        """
        return Connection(
            edges=[Edge(node=func(edge.node), cursor=edge.cursor) for edge in self.edges],
            page_info=self.page_info,
            total_count=self.total_count,
        )

    def to_cursor_page(self) -> CursorPage[T]:
        """Convert to simple REST-style pagination."""
        return CursorPage(
            items=self.nodes,
            next_cursor=self.page_info.end_cursor if self.page_info.has_next_page else None,
            prev_cursor=self.page_info.start_cursor if self.page_info.has_previous_page else None,
            has_more=self.page_info.has_next_page,
            total_count=self.total_count,
        )


class CursorPage(BaseModel, Generic[T]):
    """Simple REST-style cursor pagination response.

    Attributes:
        items: List of data items
        next_cursor: Cursor for the next page (None if no more)
        prev_cursor: Cursor for the previous page (None if at start)
        has_more: Whether more items exist after this page
        total_count: Total count (optional)
    """

    items: list[T] = Field(
        default_factory=list,
        description="List of items",
    )
    next_cursor: str | None = Field(
        default=None,
        description="Cursor to fetch next page",
    )
    prev_cursor: str | None = Field(
        default=None,
        description="Cursor to fetch previous page",
    )
    has_more: bool = Field(
        default=False,
        description="Whether more items exist",
    )
    total_count: int | None = Field(
        default=None,
        description="Total count (optional)",
    )


__all__ = [
    "Connection",
    "CursorPage",
    "Edge",
    "PageInfo",
]
