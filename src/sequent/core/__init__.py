"""
Sequent core - errors, logging and settings shared by the engine and the CLI.
"""

from sequent.core.errors import (
    ConfigError,
    ErrorCategory,
    ExecutionError,
    HandlerError,
    InvalidHandlerError,
    SequentError,
    UnhandledFailure,
)
from sequent.core.logging import LogContext, configure_logging, get_logger
from sequent.core.settings import SequentSettings, get_settings, reset_settings

__all__ = [
    # Errors
    "SequentError",
    "ErrorCategory",
    "ConfigError",
    "HandlerError",
    "InvalidHandlerError",
    "ExecutionError",
    "UnhandledFailure",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Settings
    "SequentSettings",
    "get_settings",
    "reset_settings",
]
