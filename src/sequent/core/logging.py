"""
Sequent Logging - structured logging for pipeline runs.

Uses structlog with a contextvars-backed context so that every event emitted
while a pipeline runs carries the ``run_id`` and ``pipeline`` of that run,
including events emitted from inside nested containers.

Configuration Flow:
    ::

        configure_logging(level="INFO", json_format=True)
            ↓
        structlog processor chain:
          1. filter_by_level
          2. merge_contextvars      (run_id, pipeline, ...)
          3. add_log_level
          4. add_logger_name
          5. TimeStamper (ISO, UTC)
          6. format_exc_info
          7. JSONRenderer | ConsoleRenderer
            ↓
        stdlib logging (stderr)

Usage:
    >>> from sequent.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> with LogContext(pipeline="checkout"):
    ...     logger.debug("engine.step", index=0)

Level and format default to the ``SEQUENT_LOG_LEVEL`` / ``SEQUENT_LOG_FORMAT``
settings when not passed explicitly.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from sequent.core.errors import ConfigError
from sequent.core.settings import get_settings

_configured = False


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Subsequent calls are no-ops unless ``force=True``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to settings
        json_format: True for JSON, False for console, None to use settings
        force: Reconfigure even if already configured

    Raises:
        ConfigError: If ``level`` is not a logging level name
    """
    global _configured

    if _configured and not force:
        return

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        raise ConfigError(f"Unknown log level: {log_level}")
    if json_format is None:
        json_format = settings.log_format == "json"

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )
    logging.getLogger("sequent").setLevel(numeric_level)

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def get_context() -> dict[str, Any]:
    """Return the currently bound logging context."""
    return structlog.contextvars.get_contextvars()


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Restores the previous values on exit, so nested runs that bind the same
    keys do not erase the context of the enclosing run.

    Example:
        with LogContext(pipeline="outer", run_id="abc123"):
            logger.info("engine.step")
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: Any = None

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "bind_context",
    "get_context",
    "clear_context",
    "LogContext",
]
