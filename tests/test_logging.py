"""Tests for structured logging setup."""
from __future__ import annotations

import json
import logging

import pytest
import structlog

from core.config import Settings
from core.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    engine_logger,
    generate_correlation_id,
    get_logger,
    unbind_context,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    clear_context()
    root.handlers, root.level = handlers, level


class TestLogging:
    def test_registry_returns_same_logger(self):
        assert engine_logger() is engine_logger()

    def test_correlation_id(self):
        assert len(generate_correlation_id()) == 8
        assert generate_correlation_id() != generate_correlation_id()

    def test_json_output_carries_context(self, restore_logging, capsys):
        configure_logging("DEBUG", json_logs=True)
        bind_context(exercise_id="abc12345")

        get_logger("tests.logging").info("word_bank_generated", units=3)
        unbind_context("exercise_id")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "word_bank_generated"
        assert record["exercise_id"] == "abc12345"
        assert record["units"] == 3
        assert record["service"] == "lingua-wordbank"
        assert record["level"] == "info"

    def test_configure_from_settings(self, restore_logging):
        settings = Settings(_env_file=None, LOG_LEVEL="WARNING", LOG_JSON=True)

        configure_from_settings(settings)

        assert logging.getLogger().level == logging.WARNING
