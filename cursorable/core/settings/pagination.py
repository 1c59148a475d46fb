"""Pagination settings for cursor-paginated queries.

Centralized defaults for page sizes, over-fetch behaviour and cursor
signing, shared by every paginator that does not override them.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_LIMIT=25, PAGINATION_MAX_LIMIT=100
"""

from __future__ import annotations

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Page size when neither ``first`` nor ``last`` is given.
        max_limit: Largest page size; bigger requests are clamped, not rejected.
        admin_max_limit: Largest page size for admin/audit listings.
        over_fetch: Fetch one extra row to detect whether a further page exists.
        cursor_secret: When set, cursors are HMAC-signed and verified.

    Example:
        settings = PaginationSettings()
        count = min(requested, settings.max_limit)
    """

    default_limit: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Default page size when first/last is not specified",
    )
    max_limit: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum page size; larger requests are clamped",
    )
    admin_max_limit: int = Field(
        default=1000,
        ge=1,
        le=10000,
        description="Maximum page size for admin/audit endpoints",
    )
    over_fetch: bool = Field(
        default=True,
        description="Fetch one extra row to compute has_next/has_previous",
    )
    cursor_secret: SecretStr | None = Field(
        default=None,
        description="HMAC key used to sign cursors (unsigned when empty)",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationSettings:
        if self.default_limit > self.max_limit:
            msg = "default_limit must not exceed max_limit"
            raise ValueError(msg)
        return self

    @property
    def cursor_key(self) -> bytes | None:
        """Signing key as bytes, or None when signing is disabled."""
        if self.cursor_secret is None:
            return None
        secret = self.cursor_secret.get_secret_value()
        return secret.encode() if secret else None
