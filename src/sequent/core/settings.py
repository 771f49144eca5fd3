"""Engine settings.

``SequentSettings`` reads ``SEQUENT_*`` environment variables (and a local
``.env`` file) through pydantic-settings, so behaviour that must be consistent
across a process - the name of the context's done marker, whether every step
is traced - is configured once instead of being threaded through every call.

Examples:
    >>> import os
    >>> os.environ["SEQUENT_DONE_MARKER"] = "stop"
    >>> reset_settings()
    >>> get_settings().done_marker
    'stop'

Fields
──────
log_level    : structlog log level
log_format   : ``console`` or ``json``
done_marker  : key / attribute on the context that abandons all sequences
trace_steps  : emit a DEBUG event for every dispatched handler
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sequent.core.errors import ConfigError

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SequentSettings(BaseSettings):
    """Process-wide sequent configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SEQUENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    trace_steps: bool = False

    # ── Engine ───────────────────────────────────────────────────
    done_marker: str = Field(
        default="_done",
        min_length=1,
        description="Context key/attribute that abandons all enclosing sequences",
    )

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LEVELS)}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> SequentSettings:
    """Return the cached settings instance.

    Raises:
        ConfigError: If an environment variable holds an invalid value
    """
    try:
        return SequentSettings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid sequent settings: {exc.error_count()} error(s)", cause=exc) from exc


def reset_settings() -> None:
    """Drop the cached settings so the next ``get_settings()`` re-reads the environment."""
    get_settings.cache_clear()
