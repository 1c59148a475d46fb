"""Pagination error taxonomy.

Request-level errors (the caller sent something we cannot page with):
    - UnknownSortKeyError: sort key name is not registered
    - CursorDecodeError: cursor string is not a well-formed cursor
    - CursorMismatchError: cursor decodes but was issued for other columns

Configuration-level errors (the entity was set up incorrectly):
    - SortKeyConfigError: invalid sort key definition
    - CursorEncodeError: a row value cannot be written into a cursor

None of these are retried. A failed pagination call has no side effects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from cursorable.core.database.exceptions import RepositoryError


class PaginationError(RepositoryError):
    """Base class for all pagination errors."""


class UnknownSortKeyError(PaginationError):
    """Requested sort key name is not registered for the entity."""

    def __init__(self, name: str, available: Sequence[str]):
        self.name = name
        self.available = tuple(available)
        super().__init__(
            f"Unknown sort key {name!r}",
            details={"sort_key": name, "available": list(self.available)},
        )


class CursorDecodeError(PaginationError):
    """Cursor string is malformed, tampered with, or foreign."""

    def __init__(self, reason: str, cursor: str | None = None):
        self.reason = reason
        self.cursor = cursor
        details: dict[str, Any] = {"reason": reason}
        super().__init__("Invalid cursor", details=details)


class CursorMismatchError(PaginationError):
    """Cursor is well formed but belongs to a different sort key."""

    def __init__(self, expected: Sequence[str], actual: Sequence[str]):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(
            "Cursor does not match the requested sort key",
            details={"expected": list(self.expected), "actual": list(self.actual)},
        )


class CursorEncodeError(PaginationError):
    """Row value cannot be serialized into a cursor."""

    def __init__(self, column: str, reason: str):
        self.column = column
        super().__init__(
            f"Cannot encode cursor value for column {column!r}",
            details={"column": column, "reason": reason},
        )


class SortKeyConfigError(PaginationError):
    """Sort key definition violates a configuration invariant."""

    def __init__(self, message: str, sort_key: str | None = None):
        details = {"sort_key": sort_key} if sort_key else {}
        super().__init__(message, details=details)


__all__ = [
    "CursorDecodeError",
    "CursorEncodeError",
    "CursorMismatchError",
    "PaginationError",
    "SortKeyConfigError",
    "UnknownSortKeyError",
]
