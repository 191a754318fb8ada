"""
Tests for the logging module.

Tests verify:
- JSON output carries ECS field names and service metadata
- Bound contextvars show up on events
- Settings drive level and format
"""

import json

import structlog

from bulwark.core.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from bulwark.core.settings import BulwarkSettings


def _last_json_line(capsys):
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestConfigureLogging:
    def test_json_output_is_ecs_compatible(self, capsys):
        configure_logging(level="INFO", json_format=True, service="orders")
        get_logger("test").info("boundary_exhausted", boundary="orders-db", attempts=3)

        event = _last_json_line(capsys)
        assert event["event"] == "boundary_exhausted"
        assert event["boundary"] == "orders-db"
        assert event["attempts"] == 3
        assert event["service.name"] == "orders"
        assert event["log.level"] == "info"
        assert "@timestamp" in event

    def test_debug_suppressed_at_info(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger("test").debug("boundary_attempt_failed")
        assert "boundary_attempt_failed" not in capsys.readouterr().out

    def test_console_output(self, capsys):
        configure_logging(level="DEBUG", json_format=False)
        get_logger("test").debug("boundary_created", boundary="api")
        assert "boundary_created" in capsys.readouterr().out


class TestConfigureFromSettings:
    def test_settings_level_and_format(self, capsys):
        configure_logging_from_settings(BulwarkSettings(log_level="WARNING", log_json=True))
        logger = get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert json.loads(out.strip().splitlines()[-1])["event"] == "shown"

    def test_reads_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("BULWARK_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("BULWARK_LOG_JSON", "true")
        configure_logging_from_settings()
        get_logger("test").warning("hidden")
        assert "hidden" not in capsys.readouterr().out


class TestContextVars:
    def test_bound_contextvars_are_merged(self, capsys):
        configure_logging(json_format=True)
        structlog.contextvars.bind_contextvars(request_id="abc123")
        get_logger("test").info("step")
        assert _last_json_line(capsys)["request_id"] == "abc123"

        structlog.contextvars.unbind_contextvars("request_id")
        get_logger("test").info("step")
        assert "request_id" not in _last_json_line(capsys)
