"""RFC 7807 Problem Details schema for error responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Extension members (e.g. ``reason`` for an invalid cursor) are allowed
    and serialized next to the standard fields.

    Example:
        ProblemDetails(
            type="invalid-cursor",
            title="Bad Request",
            status=400,
            detail="Invalid cursor",
            instance="http://testserver/articles?after=abc",
            reason="signature mismatch",
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    detail: str | None = Field(
        default=None,
        max_length=2000,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=2000,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "type": "cursor-mismatch",
                "title": "Bad Request",
                "status": 400,
                "detail": "Cursor does not match the requested sort key",
                "instance": "/articles?sort=title&after=eyJ2IjoxLCJmIjpbXX0",
                "expected": ["title", "id"],
                "actual": ["created_at", "id"],
            }
        },
        str_strip_whitespace=True,
    )


class ValidationErrorItem(BaseModel):
    """One field-level validation failure."""

    field: str = Field(description="Dotted location of the invalid field")
    message: str = Field(description="Validation message")
    type: str = Field(description="Validation error type")


class ValidationProblemDetails(ProblemDetails):
    """Problem details carrying field-level validation errors."""

    errors: list[ValidationErrorItem] = Field(default_factory=list)
