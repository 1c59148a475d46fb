"""Pydantic Settings v2 configuration.

Settings follow 12-factor principles:
- Environment variables are the single source of truth
- One settings model per domain (pagination, logging)
- LRU-cached loaders so values are parsed once
- Immutable (frozen) settings models
- SecretStr for sensitive fields (the cursor signing key)

Import settings via cached loaders:
    from cursorable.core.settings import get_pagination_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .loader import clear_settings_cache, get_logging_settings, get_pagination_settings
from .logs import LoggingSettings
from .pagination import PaginationSettings

__all__ = [
    "LoggingSettings",
    "PaginationSettings",
    "clear_settings_cache",
    "get_logging_settings",
    "get_pagination_settings",
]
