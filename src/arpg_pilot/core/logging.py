"""Structured logging for the autopilot.

Every module logs through structlog. Engagements and encounters scope
their identifiers (archetype, engagement label, encounter name) with
``log_context`` so that each line emitted by the combat loop carries
them without threading them through every call.

Snapshot values are logged as-is: positions and other pydantic models
are flattened to plain dicts and enum members to their values before
rendering.

Example:
    >>> from arpg_pilot.core.logging import get_logger, log_context
    >>> logger = get_logger(__name__)
    >>> with log_context(encounter="andariel"):
    ...     logger.info("Boss detected", target_id=42)
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from arpg_pilot.core.config import Settings


APP_NAME = "arpg_pilot"

_STDLIB_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# =============================================================================
# Processors
# =============================================================================


def app_context(app_name: str) -> Processor:
    """Build a processor tagging every entry with ``app_name``."""

    def add_app(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        return event_dict

    return add_app


add_app_context = app_context(APP_NAME)


def flatten_snapshot_values(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Render snapshot models and enum members as plain values.

    Args:
        logger: The wrapped logger instance.
        method_name: Name of the logging method called.
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with models dumped and enums unwrapped.
    """
    for key, value in event_dict.items():
        if isinstance(value, BaseModel):
            event_dict[key] = value.model_dump(mode="json")
        elif isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    settings: Settings | None = None,
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Explicit arguments win over the values read from settings. Debug mode
    lowers the level to DEBUG unless a level is passed.

    Args:
        settings: Settings providing ``app_name``, ``debug``, ``log_level``
            and ``json_logs``.
        level: Logging level name.
        json_format: Render JSON lines instead of the console format.
        log_file: Optional file receiving standard library records.
    """
    app_name = APP_NAME
    if settings is not None:
        app_name = settings.app_name
        level = level or ("DEBUG" if settings.debug else settings.log_level)
        json_format = settings.json_logs if json_format is None else json_format
    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context(app_name),
        flatten_snapshot_values,
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: Processor
    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(format=_STDLIB_FORMAT, level=numeric_level, handlers=handlers, force=True)


# =============================================================================
# Loggers and Context
# =============================================================================


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structlog logger, typically with ``__name__``."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> AbstractContextManager[None]:
    """Scope context variables to a ``with`` block.

    Keys bound by an outer block are restored when the inner one exits,
    so an encounter can wrap the engagements it starts.

    Example:
        >>> with log_context(archetype="lightning_caster", engagement="council"):
        ...     ...
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every bound context variable."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "APP_NAME",
    "app_context",
    "add_app_context",
    "flatten_snapshot_values",
    "configure_logging",
    "get_logger",
    "log_context",
    "clear_context",
]
