"""Logging configuration setup.

Configures the root logger once via dictConfig:
- a single console handler on the root logger (child loggers propagate)
- JSONL or plain text format, chosen by LoggingSettings.json_format
- an optional separate level for the pagination loggers
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cursorable.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

# Loggers affected by LoggingSettings.pagination_level
PAGINATION_LOGGERS = ("cursorable.core.pagination", "cursorable.pagination")

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from cursorable.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    logging.config.dictConfig(build_logging_config(settings_obj))
    _LOGGING_INITIALIZED = True
    logger.debug(
        "Logging configured",
        extra={
            "level": settings_obj.level,
            "json_format": settings_obj.json_format,
            "pagination_level": settings_obj.pagination_level,
        },
    )


def build_logging_config(settings: LoggingSettings) -> dict[str, Any]:
    """Build the dictConfig dict for the given settings.

    Args:
        settings: Logging settings.

    Returns:
        Configuration dict accepted by logging.config.dictConfig.
    """
    formatter = "json" if settings.json_format else "text"

    handlers: dict[str, Any] = {}
    if settings.console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": formatter,
            "stream": "ext://sys.stdout",
        }

    loggers: dict[str, Any] = {}
    if settings.pagination_level is not None:
        loggers = {name: {"level": settings.pagination_level} for name in PAGINATION_LOGGERS}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "cursorable.infra.logging.formatters.JSONFormatter",
                "static": {"service": "cursorable"},
            },
            "text": {"format": TEXT_FORMAT},
        },
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "level": settings.level,
            "handlers": list(handlers),
        },
    }
