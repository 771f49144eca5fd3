"""Tests for sequent.core.logging."""

import json
import logging

import pytest

from sequent.core.errors import ConfigError
from sequent.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_context,
    get_logger,
    is_configured,
)
from sequent.core.settings import reset_settings


def sequent_level_enabled(level: int) -> bool:
    return logging.getLogger("sequent").isEnabledFor(level)


class TestConfigureLogging:
    def test_marks_configured(self):
        assert not is_configured()
        configure_logging(level="DEBUG")
        assert is_configured()

    def test_second_call_is_noop(self):
        configure_logging(level="ERROR")
        configure_logging(level="DEBUG")
        assert not sequent_level_enabled(logging.DEBUG)

    def test_force_reconfigures(self):
        configure_logging(level="ERROR")
        configure_logging(level="debug", force=True)
        assert sequent_level_enabled(logging.DEBUG)

    def test_level_from_settings(self, monkeypatch):
        monkeypatch.setenv("SEQUENT_LOG_LEVEL", "WARNING")
        reset_settings()

        configure_logging()

        assert sequent_level_enabled(logging.WARNING)
        assert not sequent_level_enabled(logging.INFO)

    def test_unknown_level(self):
        with pytest.raises(ConfigError):
            configure_logging(level="verbose")
        assert not is_configured()

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True)

        with LogContext(pipeline="ingest"):
            get_logger("sequent.tests").info("engine.step", index=0)
            get_logger("sequent.tests").debug("engine.skip", index=1)

        lines = [line for line in capsys.readouterr().err.splitlines() if line.strip()]
        assert len(lines) == 1
        payload = json.loads(lines[0])
        assert payload["event"] == "engine.step"
        assert payload["pipeline"] == "ingest"
        assert payload["index"] == 0
        assert payload["level"] == "info"
        assert payload["logger"] == "sequent.tests"
        assert "timestamp" in payload


class TestContext:
    def test_bind_and_clear(self):
        bind_context(run_id="abc")
        assert get_context() == {"run_id": "abc"}
        clear_context()
        assert get_context() == {}

    def test_log_context_restores_previous_values(self):
        bind_context(pipeline="outer")

        with LogContext(pipeline="inner", run_id="r1"):
            assert get_context() == {"pipeline": "inner", "run_id": "r1"}

        assert get_context() == {"pipeline": "outer"}

    @pytest.mark.asyncio
    async def test_async_log_context(self):
        async with LogContext(pipeline="async"):
            assert get_context()["pipeline"] == "async"
        assert "pipeline" not in get_context()
