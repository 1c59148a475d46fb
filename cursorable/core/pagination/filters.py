"""Cursor filter for SQLAlchemy queries.

The CursorFilter implements the seek/keyset pagination method:
- Instead of OFFSET, WHERE conditions seek directly past the cursor row
- Cost does not grow with the page number
- Results are stable even when rows are inserted between pages

How it works:
    For ORDER BY created_at DESC, id ASC with cursor at (t1, id1):
    WHERE (created_at < t1) OR (created_at = t1 AND id > id1)

The comparison is the row-wise (lexicographic) one. A plain
``created_at < t1 AND id > id1`` would drop every row that ties with
the cursor on created_at but has a smaller id, and keep rows it should not.

CursorQueryAssembler turns a PaginationRequest into a CursorQuery: the
effective sort key, the combined WHERE clause, ORDER BY and LIMIT.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, and_, false, or_

from cursorable.core.database.filters import StatementFilter, as_clause
from cursorable.core.pagination.exceptions import CursorDecodeError, SortKeyConfigError
from cursorable.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.orm import InstrumentedAttribute

    from cursorable.core.pagination.cursor import CursorCodec, CursorFields
    from cursorable.core.pagination.request import PaginationRequest, ResolvedRequest
    from cursorable.core.pagination.sort_keys import SortColumn, SortKey, SortKeyRegistry

_lazy = get_lazy_logger(__name__)

_INT_WIDENS_TO = (float, Decimal)


def resolve_column(model: type[Any], column: str) -> InstrumentedAttribute[Any]:
    """Look up a sort column on the model.

    Raises:
        SortKeyConfigError: If the model has no such mapped attribute
    """
    attr = getattr(model, column, None)
    if attr is None or not hasattr(attr, "asc"):
        raise SortKeyConfigError(f"{model.__name__} has no sortable column {column!r}")
    return attr


class CursorFilter(StatementFilter):
    """Seek past a cursor and order by a sort key.

    The sort key passed in is the *effective* one, i.e. already reversed
    for backward pagination, so "after the cursor in scan order" is all
    this filter ever has to express.

    Example:
        stmt = CursorFilter(
            Article,
            registry.resolve("newest"),
            cursor_fields=(("published_at", t1), ("id", 42)),
            limit=21,
        ).apply(select(Article))

    Attributes:
        model: Mapped class the sort key columns live on
        sort_key: Effective sort key
        cursor_fields: Decoded cursor (None for the first page)
        limit: LIMIT value (None for no limit)
    """

    def __init__(
        self,
        model: type[Any],
        sort_key: SortKey,
        *,
        cursor_fields: CursorFields | None = None,
        limit: int | None = None,
    ) -> None:
        self.model = model
        self.sort_key = sort_key
        self.cursor_fields = cursor_fields
        self.limit = limit
        self._columns = [
            (resolve_column(model, col.column), col) for col in sort_key.columns
        ]

    def clause(self) -> ColumnElement[bool] | None:
        """Seek predicate, or None when there is no cursor.

        For columns (a, b, c) with cursor values (v1, v2, v3):
            (a op v1) OR
            (a = v1 AND b op v2) OR
            (a = v1 AND b = v2 AND c op v3)

        Where 'op' is > for ascending and < for descending columns.
        """
        if not self.cursor_fields:
            return None

        values = [value for _, value in self.cursor_fields]
        branches = []
        for i, ((attr, col), value) in enumerate(zip(self._columns, values, strict=True)):
            equal_prefix = [
                _equal(prev_attr, prev_col, prev_value)
                for (prev_attr, prev_col), prev_value in zip(
                    self._columns[:i], values[:i], strict=True
                )
            ]
            branch = _after(attr, col, value)
            branches.append(and_(*equal_prefix, branch) if equal_prefix else branch)

        return or_(*branches)

    def order_by(self) -> list[ColumnElement[Any]]:
        """ORDER BY clauses for the effective sort key."""
        clauses = []
        for attr, col in self._columns:
            clause = attr.desc() if col.direction == "desc" else attr.asc()
            if col.nulls == "first":
                clause = clause.nulls_first()
            elif col.nulls == "last":
                clause = clause.nulls_last()
            clauses.append(clause)
        return clauses

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Add seek condition, ORDER BY and LIMIT.

        Any ordering already on the statement is replaced.
        """
        statement = super().apply(statement)
        statement = statement.order_by(None).order_by(*self.order_by())
        if self.limit is not None:
            statement = statement.limit(self.limit)
        return statement


def _check_value(attr: InstrumentedAttribute[Any], col: SortColumn, value: Any) -> None:
    """Reject cursor values the column cannot be compared with.

    Raises:
        CursorDecodeError: If the value is NULL for a NOT NULL column or its
            type does not match the column type (ints may widen to
            float or Decimal)
    """
    if value is None:
        if not col.nullable:
            raise CursorDecodeError(f"null cursor value for non-nullable column {col.column!r}")
        return
    try:
        expected = attr.type.python_type
    except (AttributeError, NotImplementedError):
        return
    matches = (
        isinstance(value, expected)
        or (expected in _INT_WIDENS_TO and isinstance(value, int))
        or (issubclass(expected, Enum) and isinstance(value, str))
    )
    # bool is an int subclass but never a valid value for a numeric column
    if isinstance(value, bool) and expected is not bool:
        matches = False
    if not matches:
        raise CursorDecodeError(
            f"cursor value for {col.column!r} is {type(value).__name__}, "
            f"expected {expected.__name__}"
        )


def _after(attr: InstrumentedAttribute[Any], col: SortColumn, value: Any) -> ColumnElement[bool]:
    """Rows strictly after ``value`` on one column, in scan order."""
    _check_value(attr, col, value)
    if value is None:
        # NULLs first: every non-NULL comes after; NULLs last: nothing does
        return attr.is_not(None) if col.nulls == "first" else false()

    compare = attr < value if col.direction == "desc" else attr > value
    if col.nulls == "last":
        return or_(compare, attr.is_(None))
    return compare


def _equal(attr: InstrumentedAttribute[Any], col: SortColumn, value: Any) -> ColumnElement[bool]:
    _check_value(attr, col, value)
    if value is None:
        return attr.is_(None)
    return attr == value


@dataclass(frozen=True, slots=True)
class CursorQuery:
    """Everything needed to run one page query.

    Attributes:
        request: Resolved direction, page size and cursor
        sort_key: Sort key in natural (forward) order, used for cursors
        effective_sort_key: Sort key as scanned (reversed when backward)
        filter_clause: Caller filter only (what the count query uses)
        seek_clause: Cursor predicate only
        limit: Rows to fetch (page size + 1 with over-fetch)
        over_fetch: Whether one extra row is fetched
    """

    request: ResolvedRequest
    sort_key: SortKey
    effective_sort_key: SortKey
    cursor_filter: CursorFilter
    filter_clause: ColumnElement[bool] | None
    seek_clause: ColumnElement[bool] | None
    limit: int
    over_fetch: bool

    @property
    def where(self) -> ColumnElement[bool] | None:
        """Caller filter AND cursor predicate."""
        clauses = [c for c in (self.filter_clause, self.seek_clause) if c is not None]
        if not clauses:
            return None
        return clauses[0] if len(clauses) == 1 else and_(*clauses)

    @property
    def order_by(self) -> list[ColumnElement[Any]]:
        return self.cursor_filter.order_by()

    def apply(self, statement: Select[Any]) -> Select[Any]:
        """Turn a base statement into the page query."""
        where = self.where
        if where is not None:
            statement = statement.where(where)
        return statement.order_by(None).order_by(*self.order_by).limit(self.limit)

    def apply_count_filter(self, statement: Select[Any]) -> Select[Any]:
        """Base statement with the caller filter only (no cursor, no order)."""
        if self.filter_clause is not None:
            statement = statement.where(self.filter_clause)
        return statement.order_by(None)


class CursorQueryAssembler:
    """Build page queries from pagination requests.

    Holds the entity's sort key registry and page size limits; everything
    else comes from the request, so one assembler serves all requests.
    """

    __slots__ = ("codec", "default_limit", "max_limit", "model", "over_fetch", "registry")

    def __init__(
        self,
        model: type[Any],
        registry: SortKeyRegistry,
        codec: CursorCodec,
        *,
        default_limit: int,
        max_limit: int,
        over_fetch: bool = True,
    ) -> None:
        """Initialize assembler.

        Raises:
            SortKeyConfigError: If a sort key names a column the model lacks
        """
        self.model = model
        self.registry = registry
        self.codec = codec
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.over_fetch = over_fetch

        for key in registry.values():
            for col in key.columns:
                resolve_column(model, col.column)

    def build(self, request: PaginationRequest) -> CursorQuery:
        """Assemble the page query for a request.

        Raises:
            UnknownSortKeyError: If the sort key is not registered
            CursorDecodeError: If the cursor is malformed
            CursorMismatchError: If the cursor belongs to another sort key
        """
        resolved = request.resolve(default_limit=self.default_limit, max_limit=self.max_limit)
        sort_key = self.registry.resolve(request.sort_key)
        effective = sort_key.reverse() if resolved.is_backward else sort_key

        cursor_fields = None
        if resolved.cursor is not None:
            cursor_fields = self.codec.decode(resolved.cursor, sort_key.column_names)

        over_fetch = self.over_fetch if request.over_fetch is None else request.over_fetch
        limit = resolved.count + 1 if over_fetch else resolved.count

        cursor_filter = CursorFilter(
            self.model, effective, cursor_fields=cursor_fields, limit=limit
        )
        query = CursorQuery(
            request=resolved,
            sort_key=sort_key,
            effective_sort_key=effective,
            cursor_filter=cursor_filter,
            filter_clause=as_clause(request.where),
            seek_clause=cursor_filter.clause(),
            limit=limit,
            over_fetch=over_fetch,
        )

        if resolved.clamped:
            _lazy.debug(
                lambda: f"pagination.clamp: {self.model.__name__} requested={resolved.requested} max={self.max_limit}"
            )
        _lazy.debug(
            lambda: f"pagination.build: {self.model.__name__}(sort={sort_key.name}, "
            f"direction={resolved.direction}, count={resolved.count}, limit={limit}, "
            f"cursor={'yes' if cursor_fields else 'no'})"
        )
        return query


__all__ = ["CursorFilter", "CursorQuery", "CursorQueryAssembler", "resolve_column"]
