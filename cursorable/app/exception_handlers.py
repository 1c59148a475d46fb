"""Global exception handlers for FastAPI applications serving paginated lists."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cursorable.core.database.exceptions import NotFoundError
from cursorable.core.exceptions import (
    AppException,
    InternalServerException,
    NotFoundException,
    problem_for_pagination_error,
)
from cursorable.core.pagination.exceptions import PaginationError
from cursorable.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _problem_response(request: Request, exc: AppException) -> JSONResponse:
    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or str(request.url),
        **exc.extra,
    )
    content: dict[str, Any] = problem.model_dump(exclude_none=True)
    request_id = _get_request_id(request)
    if request_id:
        content["request_id"] = request_id
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(content))


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert an AppException into an RFC 7807 response."""
    logger.warning(
        "Application exception occurred",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    return _problem_response(request, exc)


async def pagination_error_handler(request: Request, exc: PaginationError) -> JSONResponse:
    """Convert pagination errors into RFC 7807 responses.

    Unknown sort keys, invalid cursors and mismatched cursors are client
    errors (400). Anything else from the pagination layer is a server
    fault (500) whose details are logged but not returned.
    """
    problem = problem_for_pagination_error(exc)
    log_extra = {
        "request_id": _get_request_id(request),
        "path": request.url.path,
        "method": request.method,
        "exception_type": type(exc).__name__,
        "details": exc.details,
    }

    if isinstance(problem, InternalServerException):
        logger.error("Pagination misconfigured: %s", exc, extra=log_extra)
    else:
        logger.warning("Rejected pagination request: %s", exc.message, extra=log_extra)

    return _problem_response(request, problem)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Convert a repository NotFoundError into a 404 response."""
    problem = NotFoundException(
        exc.message,
        type=f"{exc.model_name.lower()}-not-found",
        extra={key: str(value) for key, value in exc.identifier.items()},
    )
    return await app_exception_handler(request, problem)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert request validation errors (e.g. ``first=0``) into a 422 response."""
    errors = [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": _get_request_id(request),
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(errors)} field(s)",
        instance=str(request.url),
        errors=errors,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(problem.model_dump(exclude_none=True)),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the RFC 7807 exception handlers on an application.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(PaginationError, pagination_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    logger.info("Exception handlers configured")


__all__ = [
    "app_exception_handler",
    "configure_exception_handlers",
    "not_found_error_handler",
    "pagination_error_handler",
    "validation_exception_handler",
]
