"""Structured logging for the negotiation engine.

Every module logs through ``get_logger(__name__)``. Engine transitions are
logged at INFO with the counters as structured keys, rejected operations
at WARNING. Output is a coloured console stream during play at the table
and one JSON object per line in production.

Example:
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> with negotiation_context("3f2a..."):
    ...     logger.info("Argument applied", interest=3, patience=2)
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

APP_NAME = "negotiation_engine"

# Third-party loggers that flood INFO with per-request lines
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp each entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _level_number(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Render JSON lines instead of the console format.
        log_file: Also write stdlib records to this file.
    """
    threshold = _level_number(level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    record_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(format=record_format, level=threshold, stream=sys.stdout, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setLevel(threshold)
        handler.setFormatter(logging.Formatter(record_format))
        logging.getLogger().addHandler(handler)


def configure_from_settings() -> None:
    """Configure logging from the application settings.

    JSON output is used when the app runs in production mode.
    """
    from negotiation_engine.core.config import get_settings

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.is_production)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger, typically for ``__name__``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind keys onto every later log entry in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def negotiation_context(negotiation_id: Any, **kwargs: Any) -> Iterator[None]:
    """Tag log entries inside the block with a negotiation ID.

    Keys bound before the block are restored afterwards.

    Args:
        negotiation_id: Session being worked on.
        **kwargs: Extra keys to bind for the block.
    """
    with structlog.contextvars.bound_contextvars(negotiation_id=str(negotiation_id), **kwargs):
        yield


__all__ = [
    "APP_NAME",
    "bind_context",
    "clear_context",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "negotiation_context",
]
