"""Logging infrastructure.

Provides structured logging with:
- JSONL format for log aggregation
- Lazy evaluation for expensive DEBUG messages
- Settings-driven dictConfig setup

Basic usage:
    from cursorable.infra.logging import get_lazy_logger, setup_logging

    setup_logging()

    lazy_logger = get_lazy_logger(__name__)
    lazy_logger.debug(lambda: f"Cursor: {codec.loads(token)}")  # Only runs if DEBUG enabled
"""

from cursorable.infra.logging.config import build_logging_config, setup_logging
from cursorable.infra.logging.formatters import JSONFormatter
from cursorable.infra.logging.lazy import (
    LazyLoggerAdapter,
    LazyString,
    get_lazy_logger,
    lazy,
)

__all__ = [
    "JSONFormatter",
    "LazyLoggerAdapter",
    "LazyString",
    "build_logging_config",
    "get_lazy_logger",
    "lazy",
    "setup_logging",
]
