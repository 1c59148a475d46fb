"""Pagination request model.

A request is either forward (``first``/``after``) or backward
(``last``/``before``). ``resolve()`` turns the loosely-typed request into
a ``ResolvedRequest`` with one direction, one page size and at most one
cursor, applying defaults and the maximum page size.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cursorable.core.pagination.sort_keys import PaginationDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    """Request after direction, page size and cursor have been settled.

    Attributes:
        direction: "forward" or "backward"
        count: Page size after defaults and clamping
        cursor: ``after`` (forward) or ``before`` (backward), if any
        requested: Page size the caller asked for (None -> default used)
        clamped: Whether ``requested`` exceeded the maximum
    """

    direction: PaginationDirection
    count: int
    cursor: str | None = None
    requested: int | None = None
    clamped: bool = False

    @property
    def is_backward(self) -> bool:
        return self.direction == "backward"


class PaginationRequest(BaseModel):
    """Parameters of one cursor-paginated read.

    Attributes:
        first: Page size for forward pagination
        after: Cursor to continue forward from (a previous ``end_cursor``)
        last: Page size for backward pagination
        before: Cursor to continue backward from (a previous ``start_cursor``)
        sort_key: Registered sort key name (None -> the entity default)
        where: Caller filter, a SQLAlchemy boolean expression, a
            StatementFilter, or a sequence of those (ANDed)
        include_total_count: Also count all rows matching ``where``
        over_fetch: Fetch one extra row to detect further pages
            (None -> paginator default)

    Example:
        PaginationRequest(first=20, after=previous.page_info.end_cursor)
        PaginationRequest(last=20, before=current.page_info.start_cursor)
        PaginationRequest(first=20, where=Article.status == "published")
    """

    first: int | None = Field(default=None, ge=1, description="Forward page size")
    after: str | None = Field(default=None, description="Forward cursor")
    last: int | None = Field(default=None, ge=1, description="Backward page size")
    before: str | None = Field(default=None, description="Backward cursor")
    sort_key: str | None = Field(default=None, description="Sort key name")
    where: Any = Field(default=None, description="Caller filter predicate")
    include_total_count: bool = Field(default=False, description="Include total count")
    over_fetch: bool | None = Field(default=None, description="Fetch one extra row")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_forward_hint(self) -> bool:
        return self.first is not None or bool(self.after)

    @property
    def is_backward_hint(self) -> bool:
        return self.last is not None or bool(self.before)

    def resolve(self, *, default_limit: int, max_limit: int) -> ResolvedRequest:
        """Settle direction, page size and cursor.

        Rules:
            - only first/after -> forward
            - only last/before -> backward
            - neither -> forward with the default page size
            - both -> forward with the default page size, ``before`` ignored

        Page sizes above ``max_limit`` are clamped, never rejected.
        Empty cursor strings count as no cursor.
        """
        forward, backward = self.is_forward_hint, self.is_backward_hint

        if backward and not forward:
            direction: PaginationDirection = "backward"
            requested, cursor = self.last, self.before
        elif forward and not backward:
            direction = "forward"
            requested, cursor = self.first, self.after
        else:
            direction = "forward"
            requested, cursor = None, self.after
            if forward and backward:
                logger.warning(
                    "Conflicting pagination arguments, paging forward with default size",
                    extra={
                        "first": self.first,
                        "last": self.last,
                        "has_after": bool(self.after),
                        "has_before": bool(self.before),
                    },
                )

        count = requested if requested is not None else default_limit
        clamped = count > max_limit
        if clamped:
            count = max_limit

        return ResolvedRequest(
            direction=direction,
            count=count,
            cursor=cursor or None,
            requested=requested,
            clamped=clamped,
        )


__all__ = ["PaginationRequest", "ResolvedRequest"]
