"""
Tests for studio.core.logging

Tests structured logging, context correlation and redaction.
"""

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from studio.core.logging import (
    DevelopmentFormatter,
    LoggerAdapter,
    LogTimer,
    StructuredFormatter,
    clear_context,
    get_logger,
    job_id_var,
    request_id_var,
    set_job_id,
    set_request_id,
    set_sweep_id,
    setup_logging,
    sweep_id_var,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="test.module",
        level=level,
        pathname="/path/to/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _reset_context():
    clear_context()
    yield
    clear_context()


class TestStructuredFormatter:
    """Test suite for StructuredFormatter"""

    def test_format_basic_log(self):
        """Basic record renders as JSON with level, logger and message"""
        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "test.module"
        assert parsed["message"] == "Test message"
        assert parsed["line"] == 42
        assert "extra" not in parsed

    def test_format_includes_extra_fields(self):
        """Fields passed through ``extra`` end up under the extra key"""
        parsed = json.loads(StructuredFormatter().format(_record(parts=3, provider="veo")))

        assert parsed["extra"] == {"parts": 3, "provider": "veo"}

    def test_format_redacts_sensitive_extra(self):
        """Secrets in extra fields are never written out"""
        record = _record(api_key="sk-live", headers={"Authorization": "Bearer abc", "accept": "json"})
        parsed = json.loads(StructuredFormatter().format(record))

        assert parsed["extra"]["api_key"] == "***REDACTED***"
        assert parsed["extra"]["headers"]["Authorization"] == "***REDACTED***"
        assert parsed["extra"]["headers"]["accept"] == "json"

    def test_format_includes_correlation_ids(self):
        """Request, sweep and job ids from context are attached"""
        set_request_id("req-1")
        set_sweep_id("sweep-1")
        set_job_id("promo_abc")

        parsed = json.loads(StructuredFormatter().format(_record()))

        assert parsed["request_id"] == "req-1"
        assert parsed["sweep_id"] == "sweep-1"
        assert parsed["job_id"] == "promo_abc"

    def test_format_with_exception(self):
        """Exception info is rendered with type, message and traceback"""
        try:
            raise ValueError("Test exception")
        except ValueError:
            exc_info = sys.exc_info()

        parsed = json.loads(StructuredFormatter().format(_record("Error occurred", logging.ERROR, exc_info)))

        assert parsed["exception"]["type"] == "ValueError"
        assert parsed["exception"]["message"] == "Test exception"
        assert "Traceback" in parsed["exception"]["traceback"]


class TestDevelopmentFormatter:
    """Test suite for DevelopmentFormatter"""

    def test_format_basic_log(self):
        result = DevelopmentFormatter().format(_record())

        assert "Test message" in result
        assert "INFO" in result

    def test_format_shows_context(self):
        """Job id is shown in full, sweep id is shortened"""
        set_sweep_id("abcdef1234567890")
        set_job_id("ugc_123")

        result = DevelopmentFormatter().format(_record())

        assert "sweep:abcdef12" in result
        assert "job:ugc_123" in result

    def test_format_different_levels(self):
        formatter = DevelopmentFormatter()
        for level_name, level in [("DEBUG", logging.DEBUG), ("WARNING", logging.WARNING), ("ERROR", logging.ERROR)]:
            result = formatter.format(_record(f"{level_name} message", level))
            assert f"{level_name} message" in result


class TestLoggerAdapter:
    """Test suite for LoggerAdapter"""

    def test_process_adds_bound_context(self):
        adapter = LoggerAdapter(MagicMock(), extra={"component": "orchestrator"})

        msg, kwargs = adapter.process("Test message", {})

        assert msg == "Test message"
        assert kwargs["extra"]["component"] == "orchestrator"

    def test_call_site_extra_wins(self):
        """Per-call extra fields are kept and override bound ones"""
        adapter = LoggerAdapter(MagicMock(), extra={"component": "orchestrator"})

        _, kwargs = adapter.process("Test message", {"extra": {"component": "override", "parts": 2}})

        assert kwargs["extra"] == {"component": "override", "parts": 2}


class TestSetupLogging:
    """Test suite for setup_logging function"""

    def test_setup_logging_with_level(self):
        setup_logging(level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_setup_logging_json_mode(self):
        setup_logging(use_json=True)

        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredFormatter)

    def test_setup_logging_with_file(self, tmp_path):
        """A log file gets its own JSON handler"""
        log_file = tmp_path / "logs" / "studio.log"
        setup_logging(log_file=log_file)

        root = logging.getLogger()
        assert log_file.parent.exists()
        assert len(root.handlers) == 2
        assert isinstance(root.handlers[1].formatter, StructuredFormatter)

        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)

    def test_setup_logging_quiets_http_clients(self):
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    def test_get_logger_with_extra(self):
        logger = get_logger("test.module", component="test_component")

        assert isinstance(logger, logging.LoggerAdapter)
        assert logger.extra == {"component": "test_component"}


class TestContextVariables:
    """Test suite for context variable functions"""

    def test_set_and_clear(self):
        set_request_id("req-123")
        set_sweep_id("sweep-1")
        set_job_id("job-456")

        assert request_id_var.get() == "req-123"
        assert sweep_id_var.get() == "sweep-1"
        assert job_id_var.get() == "job-456"

        clear_context()

        assert request_id_var.get() is None
        assert sweep_id_var.get() is None
        assert job_id_var.get() is None


class TestLogTimer:
    """Test suite for LogTimer context manager"""

    def test_log_timer_records_duration(self):
        mock_logger = MagicMock()

        with LogTimer(mock_logger, "sweep") as timer:
            pass

        assert timer.duration is not None and timer.duration >= 0
        last_call = mock_logger.log.call_args
        assert last_call[0][1] == "Completed: sweep"
        assert "duration_seconds" in last_call[1]["extra"]

    def test_log_timer_with_exception(self):
        """Failures are logged at error level and the exception propagates"""
        mock_logger = MagicMock()

        with pytest.raises(ValueError):
            with LogTimer(mock_logger, "failing_operation"):
                raise ValueError("Test error")

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args[0][0] == "Failed: failing_operation"

    def test_log_timer_custom_level(self):
        mock_logger = MagicMock()

        with LogTimer(mock_logger, "debug_operation", level=logging.DEBUG):
            pass

        assert mock_logger.log.call_args[0][0] == logging.DEBUG
