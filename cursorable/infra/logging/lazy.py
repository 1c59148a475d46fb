"""Lazy evaluation support for logging.

Query building and page assembly log rich DEBUG detail (sort keys, decoded
cursor values, row counts). Formatting those messages costs more than the
work they describe, so they are passed as callables and only evaluated
when DEBUG is enabled for the logger.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any


class LazyString:
    """String whose value is computed when the record is formatted.

    Example:
        ```python
        logger.debug("cursor: %s", LazyString(lambda: codec.loads(token)))
        ```
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[], Any]) -> None:
        self._func = func

    def __str__(self) -> str:
        return str(self._func())

    def __repr__(self) -> str:
        return f"LazyString({self._func!r})"


class LazyLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that evaluates callable messages and args on demand.

    Example:
        ```python
        logger = get_lazy_logger("cursorable.pagination.Article")

        # The f-string only runs if DEBUG is enabled
        logger.debug(lambda: f"pagination.page: {len(edges)} items")

        # Callable format args work too
        logger.info("total: %s", lambda: connection.total_count)
        ```
    """

    def log(
        self,
        level: int,
        msg: Any,
        *args: Any,
        **kwargs: Any,
    ) -> None:
        """Log message, evaluating callables only if the level is enabled.

        Args:
            level: Numeric log level (e.g., logging.DEBUG).
            msg: Log message or callable returning message.
            *args: Format arguments (may include callables).
            **kwargs: Additional kwargs for logging.
        """
        if not self.isEnabledFor(level):
            return

        if callable(msg):
            msg = msg()

        if args:
            args = tuple(arg() if callable(arg) else arg for arg in args)

        super().log(level, msg, *args, **kwargs)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        """Log an error with the current exception attached."""
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def get_lazy_logger(name: str, **context: Any) -> LazyLoggerAdapter:
    """Get logger with lazy evaluation support.

    Args:
        name: Logger name (usually __name__ or a per-model name).
        **context: Extra fields bound to every record from this adapter.

    Returns:
        Logger adapter with lazy evaluation support.

    Example:
        ```python
        _lazy = get_lazy_logger(__name__)
        _lazy.debug(lambda: f"pagination.build: {sort_key.name}")
        ```
    """
    return LazyLoggerAdapter(logging.getLogger(name), context or {})


def lazy(func: Callable[[], Any]) -> LazyString:
    """Wrap a callable in a LazyString for use as a ``%s`` argument."""
    return LazyString(func)
