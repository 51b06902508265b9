"""Tests for logging setup."""

import logging

import structlog

from skillswap.config.settings import get_settings
from skillswap.observability.logging import bind_context, clear_context, setup_logging


def _configure(monkeypatch, environment: str) -> None:
    monkeypatch.setenv("ENVIRONMENT", environment)
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    get_settings.cache_clear()
    structlog.reset_defaults()
    setup_logging()


class TestSetupLogging:
    """Tests for setup_logging()."""

    def setup_method(self):
        root = logging.getLogger()
        self._handlers = root.handlers[:]
        self._level = root.level

    def teardown_method(self):
        root = logging.getLogger()
        root.handlers = self._handlers
        root.setLevel(self._level)
        clear_context()
        get_settings.cache_clear()
        structlog.reset_defaults()

    def test_stdlib_records_rendered_as_json_in_production(self, monkeypatch, capsys):
        _configure(monkeypatch, "production")
        bind_context(request_id="req-1")

        logging.getLogger("skillswap.scoring").info("Credibility for %s: %d", "u1", 72)

        out = capsys.readouterr().out
        assert '"event": "Credibility for u1: 72"' in out
        assert '"request_id": "req-1"' in out

    def test_single_root_handler_after_repeat_calls(self, monkeypatch):
        _configure(monkeypatch, "development")
        setup_logging()

        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
