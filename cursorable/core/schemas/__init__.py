"""Shared response schemas."""

from cursorable.core.schemas.problem_details import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)

__all__ = ["ProblemDetails", "ValidationErrorItem", "ValidationProblemDetails"]
