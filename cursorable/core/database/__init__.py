"""Database layer: declarative base, repository and statement filters."""

from cursorable.core.database.base import (
    NAMING_CONVENTION,
    Base,
    IntegerPKMixin,
    TimestampMixin,
    UUIDPKMixin,
)
from cursorable.core.database.exceptions import (
    InvalidFilterError,
    NotFoundError,
    RepositoryError,
)
from cursorable.core.database.filters import (
    BeforeAfter,
    CollectionFilter,
    FilterGroup,
    SearchFilter,
    StatementFilter,
    as_clause,
)
from cursorable.core.database.repository import BaseRepository

__all__ = [
    "NAMING_CONVENTION",
    "Base",
    "BaseRepository",
    "BeforeAfter",
    "CollectionFilter",
    "FilterGroup",
    "IntegerPKMixin",
    "InvalidFilterError",
    "NotFoundError",
    "RepositoryError",
    "SearchFilter",
    "StatementFilter",
    "TimestampMixin",
    "UUIDPKMixin",
    "as_clause",
]
