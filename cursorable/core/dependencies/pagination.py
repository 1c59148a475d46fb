"""Cursor pagination dependencies for FastAPI routes.

Reads the Relay-style query parameters into a ``PaginationRequest``:

    GET /articles?first=20
    GET /articles?first=20&after=<end_cursor>
    GET /articles?last=20&before=<start_cursor>&sort=title
    GET /articles?first=20&include_total=true

Page sizes are only checked for being positive here. Sizes above the
paginator's maximum are clamped by the paginator, not rejected.

Usage:
    from cursorable.core.dependencies import CursorPagination

    @router.get("/articles", response_model=Connection[ArticleResponse])
    async def list_articles(
        session: DbSession,
        pagination: CursorPagination,
    ) -> Connection[ArticleResponse]:
        connection = await article_paginator.get_connection(session, pagination)
        return connection.map_nodes(ArticleResponse.model_validate)

    # Adding a caller filter:
    request = pagination.model_copy(update={"where": Article.status == "published"})
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query

from cursorable.core.pagination.request import PaginationRequest


def get_cursor_pagination(
    first: Annotated[
        int | None,
        Query(ge=1, description="Page size when paging forward"),
    ] = None,
    after: Annotated[
        str | None,
        Query(description="Return items after this cursor"),
    ] = None,
    last: Annotated[
        int | None,
        Query(ge=1, description="Page size when paging backward"),
    ] = None,
    before: Annotated[
        str | None,
        Query(description="Return items before this cursor"),
    ] = None,
    sort: Annotated[
        str | None,
        Query(description="Sort key name (default sort key when omitted)"),
    ] = None,
    include_total: Annotated[
        bool,
        Query(description="Include the total number of matching items"),
    ] = False,
) -> PaginationRequest:
    """Get cursor pagination parameters.

    Returns:
        PaginationRequest without a caller filter.
    """
    return PaginationRequest(
        first=first,
        after=after,
        last=last,
        before=before,
        sort_key=sort,
        include_total_count=include_total,
    )


# Type alias for cleaner route signatures
CursorPagination = Annotated[PaginationRequest, Depends(get_cursor_pagination)]
