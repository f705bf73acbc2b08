"""
Unit Tests for Centralized Logging.

Tests configuration loading, handler setup, and the record processors.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

from snack.backend.core import logging as logging_module
from snack.backend.core.config_schema import LoggingSchema
from snack.backend.core.logging import (
    REDACTED,
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    lift_extra,
    log_with_source,
    make_redactor,
    normalize_source,
    setup_logging,
)


@pytest.fixture
def raw_logging_config():
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": True},
            "file": {
                "enabled": False,
                "path": "logs/snack.jsonl",
                "max_bytes": 10485760,
                "backup_count": 5,
            },
        },
        "library_levels": {"stripe": "WARNING", "httpx": "WARNING"},
        "redact_keys": ["password", "refresh_token"],
    }


@pytest.fixture
def logging_config(raw_logging_config):
    return LoggingSchema(**raw_logging_config)


@pytest.fixture(autouse=True)
def _reset_cached_config():
    logging_module._logging_config = None
    yield
    logging_module._logging_config = None


class TestLoggingConfigLoading:
    def test_reads_logging_yaml_once(self, raw_logging_config):
        with patch(
            "snack.backend.core.logging.load_yaml_config",
            return_value=raw_logging_config,
        ) as load:
            first = logging_module._load_logging_config()
            second = logging_module._load_logging_config()

        assert first is second
        assert first.library_levels["stripe"] == "WARNING"
        load.assert_called_once_with("logging.yaml")

    def test_missing_file_propagates(self):
        with patch(
            "snack.backend.core.logging.load_yaml_config",
            side_effect=FileNotFoundError("Configuration file not found: logging.yaml"),
        ):
            with pytest.raises(FileNotFoundError, match="logging.yaml"):
                logging_module._load_logging_config()

    def test_unknown_format_rejected(self, raw_logging_config):
        raw_logging_config["format"] = "xml"
        with patch("snack.backend.core.logging.load_yaml_config", return_value=raw_logging_config):
            with pytest.raises(ValueError):
                logging_module._load_logging_config()


class TestSetupLogging:
    def test_override_level_takes_precedence(self, logging_config):
        with patch("snack.backend.core.logging._load_logging_config", return_value=logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

        assert logging.getLogger().level == logging.DEBUG

    def test_uses_config_defaults(self, logging_config):
        with patch("snack.backend.core.logging._load_logging_config", return_value=logging_config):
            setup_logging()

        assert logging.getLogger().level == logging.INFO

    def test_console_handler_without_file(self, logging_config):
        with patch("snack.backend.core.logging._load_logging_config", return_value=logging_config):
            setup_logging(format_type="console", enable_file_logging=False)

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert handler_types == ["StreamHandler"]

    def test_file_handler_writes_under_resolved_path(self, tmp_path, logging_config):
        log_file = tmp_path / "logs" / "snack.jsonl"

        with patch("snack.backend.core.logging._load_logging_config", return_value=logging_config), \
             patch("snack.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_console=False, enable_file_logging=True)

        handler_types = [type(h).__name__ for h in logging.getLogger().handlers]
        assert handler_types == ["RotatingFileHandler"]
        assert log_file.parent.is_dir()

    def test_library_levels_applied(self, logging_config):
        with patch("snack.backend.core.logging._load_logging_config", return_value=logging_config):
            setup_logging(level="DEBUG", enable_file_logging=False)

        assert logging.getLogger("stripe").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING


class TestProcessors:
    def test_extra_lifted_without_overwriting(self):
        event = {"event": "List created", "list_id": "bound", "extra": {"list_id": "extra", "count": 2}}

        result = lift_extra(None, "info", event)

        assert result == {"event": "List created", "list_id": "bound", "count": 2}

    def test_unknown_source_normalized(self):
        assert normalize_source(None, "info", {"source": "fax"})["source"] == "unknown"
        assert normalize_source(None, "info", {"source": "webhook"})["source"] == "webhook"
        assert "source" not in normalize_source(None, "info", {})

    def test_redactor_masks_sensitive_keys(self):
        redact = make_redactor(["password", "Refresh_Token"])

        result = redact(None, "info", {"password": "hunter2", "refresh_token": "abc", "user_id": "u1"})

        assert result == {"password": REDACTED, "refresh_token": REDACTED, "user_id": "u1"}

    def test_redactor_leaves_none(self):
        redact = make_redactor(["password"])

        assert redact(None, "info", {"password": None}) == {"password": None}

    def test_sources_cover_request_and_background_work(self):
        assert {"web", "extension", "cli", "webhook"} <= VALID_SOURCES


class TestGetLogger:
    def test_returns_structlog_logger(self):
        logger = get_logger("snack.tests")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    def test_adds_source_field(self):
        logger = MagicMock()

        log_with_source(logger, "webhook", "info", "Stripe webhook processed", event_type="charge.refunded")

        logger.info.assert_called_once_with(
            "Stripe webhook processed",
            source="webhook",
            event_type="charge.refunded",
        )

    def test_invalid_level_raises(self):
        logger = get_logger("snack.tests")
        with pytest.raises(AttributeError):
            log_with_source(logger, "cli", "nonexistent_level", "Test")


class TestResolveLogPath:
    def test_relative_to_project_root(self, tmp_path):
        with patch("snack.backend.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/snack.jsonl") == tmp_path / "logs" / "snack.jsonl"
