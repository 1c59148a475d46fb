"""Query filtering utilities for SQLAlchemy.

Filters are small predicate values: each one renders to a single SQLAlchemy
boolean clause via ``clause()`` and can be applied to any statement via
``apply()``. Because the clause is a value rather than a callback, the same
filter produces identical WHERE logic in the page query and in the count
query of a paginated read.

Usage:
    from sqlalchemy import select
    from cursorable.core.database.filters import CollectionFilter, FilterGroup, SearchFilter

    visible = FilterGroup([
        SearchFilter(Article.title, "python"),
        CollectionFilter(Article.status, ["published", "featured"]),
    ])
    stmt = visible.apply(select(Article))

    # Or hand it to a paginator, which ANDs it with the cursor predicate
    await paginator.get_connection(session, PaginationRequest(first=20, where=visible))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import ColumnElement, Select, and_, false, func, or_, true

from cursorable.core.database.exceptions import InvalidFilterError

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.orm import InstrumentedAttribute


class StatementFilter(ABC):
    """Base class for statement filters.

    Subclasses implement ``clause()``; ``apply()`` adds it to a statement.
    """

    @abstractmethod
    def clause(self) -> ColumnElement[bool] | None:
        """Render the filter as one boolean clause.

        Returns:
            Boolean clause, or None when the filter matches everything
        """
        ...

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Apply filter to statement.

        Args:
            statement: SQLAlchemy select statement

        Returns:
            Modified select statement
        """
        condition = self.clause()
        if condition is None:
            return statement
        return statement.where(condition)


class SearchFilter(StatementFilter):
    """Multi-field text search using LIKE.

    Example:
        SearchFilter([Article.title, Article.summary], "python")
        # WHERE (lower(title) LIKE '%python%' OR lower(summary) LIKE '%python%')
    """

    def __init__(
        self,
        fields: InstrumentedAttribute[Any] | Sequence[InstrumentedAttribute[Any]],
        value: str,
        *,
        case_insensitive: bool = True,
        operator: Literal["and", "or"] = "or",
    ):
        """Initialize search filter.

        Args:
            fields: Single field or list of fields to search
            value: Search term
            case_insensitive: Compare lower-cased values
            operator: Join multiple fields with AND or OR
        """
        self.fields = [fields] if not isinstance(fields, Sequence) else list(fields)
        self.value = value
        self.case_insensitive = case_insensitive
        self.operator = operator

    def clause(self) -> ColumnElement[bool] | None:
        if not self.value or not self.fields:
            return None

        search_term = f"%{self.value}%"
        if self.case_insensitive:
            conditions = [func.lower(f).like(search_term.lower()) for f in self.fields]
        else:
            conditions = [f.like(search_term) for f in self.fields]

        if self.operator == "or":
            return or_(*conditions)
        return and_(*conditions)


class CollectionFilter(StatementFilter):
    """Filter by collection (WHERE ... IN).

    Example:
        CollectionFilter(Article.status, ["draft", "archived"], invert=True)
        # WHERE status NOT IN ('draft', 'archived')
    """

    def __init__(
        self,
        field: InstrumentedAttribute[Any],
        values: Sequence[Any],
        *,
        invert: bool = False,
    ):
        """Initialize collection filter.

        Args:
            field: Field to filter
            values: Collection of values to match
            invert: If True, use NOT IN instead of IN
        """
        self.field = field
        self.values = list(values)
        self.invert = invert

    def clause(self) -> ColumnElement[bool] | None:
        if not self.values:
            # IN () matches nothing, NOT IN () matches everything
            return None if self.invert else false()
        if self.invert:
            return self.field.not_in(self.values)
        return self.field.in_(self.values)


class BeforeAfter(StatementFilter):
    """Date/time range filtering (exclusive bounds).

    Example:
        BeforeAfter(Article.published_at, after=datetime(2024, 1, 1))
    """

    def __init__(
        self,
        field: InstrumentedAttribute[Any],
        *,
        before: datetime | None = None,
        after: datetime | None = None,
    ):
        self.field = field
        self.before = before
        self.after = after

    def clause(self) -> ColumnElement[bool] | None:
        conditions = []
        if self.after is not None:
            conditions.append(self.field > self.after)
        if self.before is not None:
            conditions.append(self.field < self.before)
        if not conditions:
            return None
        return and_(*conditions)


class FilterGroup(StatementFilter):
    """Combine filters with AND or OR.

    Example:
        FilterGroup([
            SearchFilter(Article.title, "python"),
            CollectionFilter(Article.status, ["featured"]),
        ], operator="or")
    """

    def __init__(
        self,
        filters: Sequence[StatementFilter | ColumnElement[bool]],
        operator: Literal["and", "or"] = "and",
    ):
        """Initialize filter group.

        Args:
            filters: Filters or raw boolean clauses to combine
            operator: Join them with AND or OR
        """
        self.filters = list(filters)
        self.operator = operator

    def clause(self) -> ColumnElement[bool] | None:
        clauses = [c for c in (as_clause(f) for f in self.filters) if c is not None]
        if not clauses:
            return None
        if self.operator == "or":
            # A member that matches everything makes the whole group match everything
            if len(clauses) != len(self.filters):
                return true()
            return or_(*clauses)
        return and_(*clauses)


def as_clause(value: Any) -> ColumnElement[bool] | None:
    """Normalize a caller filter to a single boolean clause.

    Accepts None, a SQLAlchemy boolean expression, a StatementFilter, or a
    list/tuple of those (ANDed).

    Raises:
        InvalidFilterError: For any other value
    """
    if value is None:
        return None
    if isinstance(value, StatementFilter):
        return value.clause()
    if isinstance(value, ColumnElement):
        return value
    if isinstance(value, list | tuple):
        clauses = [c for c in (as_clause(v) for v in value) if c is not None]
        if not clauses:
            return None
        return clauses[0] if len(clauses) == 1 else and_(*clauses)
    raise InvalidFilterError(
        f"Unsupported filter value of type {type(value).__name__}",
        filter_name="where",
    )


__all__ = [
    "BeforeAfter",
    "CollectionFilter",
    "FilterGroup",
    "SearchFilter",
    "StatementFilter",
    "as_clause",
]
