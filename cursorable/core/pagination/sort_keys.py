"""Named sort keys for cursor pagination.

A sort key is an ordered list of columns, each with a direction and a
``reversible`` flag. Backward pagination ("the last N before X") scans the
table in the opposite order and flips the page back afterwards, so each
reversible column has its direction flipped for the scan. Non-reversible
columns keep their direction: they are tiebreakers (usually a unique id)
whose only job is to make the order total.

Example:
    from cursorable.core.pagination import SortKeyRegistry, asc, desc

    article_sort_keys = SortKeyRegistry(
        {
            "newest": [desc("published_at", reversible=True), asc("id")],
            "title": [asc("title", reversible=True), asc("id")],
        },
        default="newest",
    )

    key = article_sort_keys.resolve("newest")
    scan = article_sort_keys.reverse(key)
    # published_at ASC, id ASC
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from cursorable.core.pagination.exceptions import SortKeyConfigError, UnknownSortKeyError

SortDirection = Literal["asc", "desc"]
NullsPlacement = Literal["first", "last"]
PaginationDirection = Literal["forward", "backward"]

_FLIPPED_DIRECTION: dict[str, SortDirection] = {"asc": "desc", "desc": "asc"}
_FLIPPED_NULLS: dict[str, NullsPlacement] = {"first": "last", "last": "first"}


@dataclass(frozen=True, slots=True)
class SortColumn:
    """One column of a sort key.

    Attributes:
        column: Mapped attribute name on the model
        direction: "asc" or "desc" in natural (forward) order
        reversible: Flip this column's direction when scanning backward
        nulls: Where NULLs sort ("first"/"last"); None means the column is NOT NULL
    """

    column: str
    direction: SortDirection = "asc"
    reversible: bool = False
    nulls: NullsPlacement | None = None

    def __post_init__(self) -> None:
        if not self.column:
            raise SortKeyConfigError("Sort column name must not be empty")
        if self.direction not in _FLIPPED_DIRECTION:
            msg = f"Invalid direction {self.direction!r} for column {self.column!r}"
            raise SortKeyConfigError(msg)
        if self.nulls is not None and self.nulls not in _FLIPPED_NULLS:
            msg = f"Invalid nulls placement {self.nulls!r} for column {self.column!r}"
            raise SortKeyConfigError(msg)

    @property
    def nullable(self) -> bool:
        return self.nulls is not None

    def reversed(self) -> SortColumn:
        """Return the column as scanned during backward pagination."""
        if not self.reversible:
            return self
        return SortColumn(
            column=self.column,
            direction=_FLIPPED_DIRECTION[self.direction],
            reversible=True,
            nulls=_FLIPPED_NULLS[self.nulls] if self.nulls else None,
        )


def asc(column: str, *, reversible: bool = False, nulls: NullsPlacement | None = None) -> SortColumn:
    """Ascending sort column."""
    return SortColumn(column, "asc", reversible, nulls)


def desc(column: str, *, reversible: bool = False, nulls: NullsPlacement | None = None) -> SortColumn:
    """Descending sort column."""
    return SortColumn(column, "desc", reversible, nulls)


ColumnSpec = SortColumn | tuple[str, SortDirection] | tuple[str, SortDirection, bool]


def _as_sort_column(spec: ColumnSpec) -> SortColumn:
    if isinstance(spec, SortColumn):
        return spec
    if isinstance(spec, tuple) and 2 <= len(spec) <= 3:
        return SortColumn(*spec)
    raise SortKeyConfigError(f"Cannot build a sort column from {spec!r}")


@dataclass(frozen=True, slots=True)
class SortKey:
    """Named, ordered set of sort columns.

    Invariants (checked on construction):
        - at least one column
        - no column appears twice
        - at least one column is non-reversible (the tiebreaker)
    """

    name: str
    columns: tuple[SortColumn, ...]
    is_reversed: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if not self.columns:
            raise SortKeyConfigError("Sort key must have at least one column", self.name)
        names = [col.column for col in self.columns]
        if len(set(names)) != len(names):
            raise SortKeyConfigError("Sort key repeats a column", self.name)
        if all(col.reversible for col in self.columns):
            raise SortKeyConfigError(
                "Sort key needs a non-reversible tiebreaker column", self.name
            )

    @classmethod
    def build(cls, name: str, columns: Sequence[ColumnSpec]) -> SortKey:
        return cls(name, tuple(_as_sort_column(spec) for spec in columns))

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(col.column for col in self.columns)

    @property
    def not_null_columns(self) -> frozenset[str]:
        """Columns declared NOT NULL (no ``nulls`` placement)."""
        return frozenset(col.column for col in self.columns if not col.nullable)

    def reverse(self) -> SortKey:
        """Flip reversible columns; tiebreakers keep their direction."""
        return SortKey(
            self.name,
            tuple(col.reversed() for col in self.columns),
            is_reversed=not self.is_reversed,
        )

    def __iter__(self) -> Iterator[SortColumn]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)


class SortKeyRegistry(Mapping[str, SortKey]):
    """Immutable name -> SortKey mapping for one entity.

    Created once at setup and only read afterwards, so a single instance
    can be shared by concurrent requests.
    """

    __slots__ = ("_default", "_keys")

    def __init__(
        self,
        sort_keys: Mapping[str, Sequence[ColumnSpec] | SortKey],
        *,
        default: str | None = None,
    ) -> None:
        """Initialize registry.

        Args:
            sort_keys: Mapping of sort key name to its columns
            default: Sort key used when a request names none
                (defaults to the first key)

        Raises:
            SortKeyConfigError: If no keys are given, a key is invalid,
                or ``default`` is not one of the keys
        """
        if not sort_keys:
            raise SortKeyConfigError("At least one sort key is required")

        keys: dict[str, SortKey] = {}
        for name, columns in sort_keys.items():
            if isinstance(columns, SortKey):
                keys[name] = columns if columns.name == name else SortKey(name, columns.columns)
            else:
                keys[name] = SortKey.build(name, columns)

        default = default if default is not None else next(iter(keys))
        if default not in keys:
            raise SortKeyConfigError("Default sort key is not registered", default)

        self._keys = MappingProxyType(keys)
        self._default = default

    @property
    def default(self) -> str:
        return self._default

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._keys)

    def resolve(self, name: str | None = None) -> SortKey:
        """Look up a sort key by name (None -> default).

        Raises:
            UnknownSortKeyError: If the name is not registered
        """
        key = self._keys.get(self._default if name is None else name)
        if key is None:
            raise UnknownSortKeyError(str(name), self.names)
        return key

    def reverse(self, sort_key: SortKey) -> SortKey:
        return sort_key.reverse()

    def effective(self, name: str | None, direction: PaginationDirection) -> SortKey:
        """Sort key as scanned for the given pagination direction."""
        key = self.resolve(name)
        return key.reverse() if direction == "backward" else key

    def __getitem__(self, name: str) -> SortKey:
        return self._keys[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f"SortKeyRegistry(names={list(self._keys)!r}, default={self._default!r})"


__all__ = [
    "NullsPlacement",
    "PaginationDirection",
    "SortColumn",
    "SortDirection",
    "SortKey",
    "SortKeyRegistry",
    "asc",
    "desc",
]
