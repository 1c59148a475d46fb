"""HTTP-facing exception classes.

Follows RFC 7807 Problem Details for HTTP APIs. Pagination errors are
raised as ``PaginationError`` subclasses by the engine and converted to
these at the HTTP boundary (see ``problem_for_pagination_error``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cursorable.core.pagination.exceptions import PaginationError


class AppException(Exception):
    """Base application exception.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
        raise AppException(
            status_code=400,
            detail="Invalid cursor",
            type="invalid-cursor",
            extra={"reason": "bad base64"},
        )
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        titles = {
            400: "Bad Request",
            404: "Not Found",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
        }
        return titles.get(status_code, "Error")


class BadRequestException(AppException):
    """Exception raised for malformed client input.

    Example:
        raise BadRequestException(
            detail="Unknown sort key 'oldest'",
            type="unknown-sort-key",
            extra={"available": ["newest", "title"]},
        )
    """

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class NotFoundException(AppException):
    """Exception raised when a resource is not found."""

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class InternalServerException(AppException):
    """Exception raised for server-side faults the client cannot fix."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing your request",
        type: str = "internal-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=500,
            detail=detail,
            type=type,
            title="Internal Server Error",
            instance=instance,
            extra=extra,
        )


def problem_for_pagination_error(exc: PaginationError) -> AppException:
    """Convert a pagination error into its HTTP exception.

    Request errors become 400 problems with a stable ``type``. Sort key
    configuration and cursor encoding errors are server faults; their
    details stay in the logs, not in the response.
    """
    from cursorable.core.pagination.exceptions import (
        CursorDecodeError,
        CursorMismatchError,
        UnknownSortKeyError,
    )

    match exc:
        case UnknownSortKeyError():
            return BadRequestException(exc.message, type="unknown-sort-key", extra=exc.details)
        case CursorDecodeError():
            return BadRequestException(exc.message, type="invalid-cursor", extra=exc.details)
        case CursorMismatchError():
            return BadRequestException(exc.message, type="cursor-mismatch", extra=exc.details)
        case _:
            return InternalServerException(type="pagination-misconfigured")


__all__ = [
    "AppException",
    "BadRequestException",
    "InternalServerException",
    "NotFoundException",
    "problem_for_pagination_error",
]
