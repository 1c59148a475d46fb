"""Database repository exceptions.

Custom exceptions for repository operations that provide better
error messages and typing than raw SQLAlchemy exceptions.
"""
from __future__ import annotations

from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations.

    Raised when a repository operation fails because of the way it was
    called or configured, as opposed to backend failures, which surface
    as the driver's or SQLAlchemy's own exceptions.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize repository error.

        Args:
            message: Error description
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Format error message with details."""
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class NotFoundError(RepositoryError):
    """Entity not found in database.

    Attributes:
        model_name: Name of the model class that wasn't found
        identifier: The key/value that was searched for
    """

    def __init__(self, model_name: str, identifier: dict[str, Any]):
        """Initialize not found error.

        Args:
            model_name: Name of the model (e.g., "Article")
            identifier: Key-value pairs used in the search (e.g., {"id": 123})
        """
        self.model_name = model_name
        self.identifier = identifier

        id_str = ", ".join(f"{k}={v!r}" for k, v in identifier.items())
        message = f"{model_name} not found with {id_str}"

        super().__init__(message, details={"model": model_name, **identifier})

    def __repr__(self) -> str:
        """Repr for debugging."""
        return f"NotFoundError(model={self.model_name!r}, identifier={self.identifier!r})"


class InvalidFilterError(RepositoryError):
    """Invalid filter or query parameters.

    Raised when a filter value cannot be turned into a SQL predicate,
    e.g. an object that is neither a SQLAlchemy expression nor a
    StatementFilter.
    """

    def __init__(self, message: str, filter_name: str | None = None):
        """Initialize invalid filter error.

        Args:
            message: Error description
            filter_name: Name of the problematic filter (if applicable)
        """
        details = {"filter": filter_name} if filter_name else {}
        super().__init__(message, details=details)


__all__ = [
    "InvalidFilterError",
    "NotFoundError",
    "RepositoryError",
]
