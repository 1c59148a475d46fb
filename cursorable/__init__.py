"""Cursor-based pagination for SQLAlchemy models.

    from cursorable.core.database import BaseRepository
    from cursorable.core.pagination import PaginationRequest, SortKeyRegistry, asc, desc
"""

__version__ = "0.1.0"
