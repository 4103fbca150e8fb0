"""Tests for structlog setup."""

import logging

import structlog

from tandem.config.settings import Settings
from tandem.lib.logging import setup_logging, wizard_log_context


class TestSetupLogging:
    def test_dev_mode_uses_console_renderer(self):
        setup_logging(Settings(dev_mode=True, log_level="DEBUG"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, structlog.stdlib.ProcessorFormatter)
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in formatter.processors)

    def test_production_uses_json_renderer(self):
        setup_logging(Settings(dev_mode=False, log_level="WARNING"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        formatter = root.handlers[0].formatter
        assert any(isinstance(p, structlog.processors.JSONRenderer) for p in formatter.processors)

    def test_noisy_loggers_quieted(self):
        setup_logging(Settings(log_level="DEBUG"))
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestWizardLogContext:
    def test_binds_and_restores(self):
        with wizard_log_context("review", "user-1", "2026-W42"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["wizard"] == "review"
            assert bound["user_id"] == "user-1"
            assert bound["week_id"] == "2026-W42"
        assert "wizard" not in structlog.contextvars.get_contextvars()
