"""Tests for errorhandler.core.logging module."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from errorhandler.core.config import ErrorHandlerConfig
from errorhandler.core.logging import (
    SENSITIVE_PATTERNS,
    ErrorHandlerLogger,
    _sanitize_event_dict,
    _sanitize_value,
    configure_logging,
    get_logger,
)


class TestSensitivePatterns:
    """Tests for sensitive field detection and sanitization."""

    def test_known_sensitive_patterns(self):
        """Test that common sensitive patterns are included."""
        assert "api_key" in SENSITIVE_PATTERNS
        assert "token" in SENSITIVE_PATTERNS
        assert "password" in SENSITIVE_PATTERNS
        assert "authorization" in SENSITIVE_PATTERNS

    def test_sanitize_value_redacts_compound_keys(self):
        """Test that compound key names containing sensitive patterns are redacted."""
        assert _sanitize_value("oauth_token", "ya29.abc") == "[REDACTED]"
        assert _sanitize_value("Authorization", "Bearer x") == "[REDACTED]"

    def test_sanitize_value_preserves_safe_values(self):
        """Test that error context fields are preserved."""
        assert _sanitize_value("known_error", True) is True
        assert _sanitize_value("original_message", "Not Found") == "Not Found"
        assert _sanitize_value("number_retry", 3) == 3

    def test_sanitize_event_dict_handles_custom_params(self):
        """Caller params nested in an error record are sanitized too."""
        event_dict = {
            "event": "error_reported",
            "message": "RuntimeError: boom",
            "custom_params": {"api_key": "sk-secret", "campaign_id": "c-1"},
        }

        result = _sanitize_event_dict(None, "error", event_dict)

        assert result["message"] == "RuntimeError: boom"
        assert result["custom_params"]["api_key"] == "[REDACTED]"
        assert result["custom_params"]["campaign_id"] == "c-1"


class TestErrorHandlerLogger:
    """Tests for the ErrorHandlerLogger class."""

    def test_bind_returns_new_logger(self):
        """Test that bind() returns a new logger instance."""
        logger = ErrorHandlerLogger("backoff")
        bound_logger = logger.bind(operation="fetch")

        assert bound_logger is not logger
        assert bound_logger._component == "backoff"
        assert bound_logger._context == {"component": "backoff", "operation": "fetch"}
        assert logger._context == {"component": "backoff"}

    def test_get_logger_binds_initial_context(self):
        logger = get_logger("reporter", addon="Mail Merge")
        assert isinstance(logger, ErrorHandlerLogger)
        assert logger._context == {"component": "reporter", "addon": "Mail Merge"}

    def test_module_logger_respects_later_configuration(self, capsys: pytest.CaptureFixture[str]):
        """Loggers created before configure_logging() pick up its settings."""
        logger = get_logger("backoff")

        configure_logging(level="WARNING", format="console")
        logger.info("backoff.sleeping", delay_seconds=1.0)
        logger.warning("backoff.slow", delay_seconds=16.0)

        err = capsys.readouterr().err
        assert "backoff.sleeping" not in err
        assert "backoff.slow" in err
        assert "component=backoff" in err


class TestConfigureLogging:
    """Tests for the configure_logging function."""

    def test_configure_sets_log_level(self):
        configure_logging(level="WARNING", format="console")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_both_requires_file_path(self):
        with pytest.raises(ValueError, match="file_path is required"):
            configure_logging(level="INFO", format="both", file_path=None)

    def test_configure_removes_existing_handlers(self):
        root_logger = logging.getLogger()
        existing_handler = logging.StreamHandler()
        root_logger.addHandler(existing_handler)

        configure_logging(level="INFO", format="console")

        assert existing_handler not in root_logger.handlers
        assert len(root_logger.handlers) == 1

    def test_json_file_output(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "errorhandler.log"

        configure_logging(level="INFO", format="json", file_path=log_file)
        get_logger("reporter").error("error_reported", message="Exception: Not Found", token="t")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["event"] == "error_reported"
        assert entry["component"] == "reporter"
        assert entry["level"] == "error"
        assert entry["token"] == "[REDACTED]"
        assert "timestamp" in entry

    def test_both_writes_console_to_stderr_and_json_to_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ):
        log_file = tmp_path / "errorhandler.log"

        configure_logging(level="INFO", format="both", file_path=log_file)
        get_logger("backoff").info("backoff.sleeping", delay_seconds=2.0)
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["event"] == "backoff.sleeping"
        assert entry["component"] == "backoff"
        assert entry["delay_seconds"] == 2.0

        err = capsys.readouterr().err
        assert "backoff.sleeping" in err
        assert "component=backoff" in err
        assert not err.lstrip().startswith("{")

    def test_timestamps_can_be_disabled(self, tmp_path: Path):
        log_file = tmp_path / "errorhandler.log"

        configure_logging(format="json", file_path=log_file, include_timestamps=False)
        get_logger("reporter").warning("error_reported")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert "timestamp" not in entry

    def test_config_applies_logging_section(self, tmp_path: Path):
        config = ErrorHandlerConfig.from_yaml_string(
            f"logging:\n  level: ERROR\n  format: json\n  file_path: {tmp_path / 'e.log'}\n"
        )

        config.configure_logging()

        assert logging.getLogger().level == logging.ERROR
        assert (tmp_path / "e.log").exists()
