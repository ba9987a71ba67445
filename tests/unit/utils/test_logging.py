"""Tests for logging configuration utilities."""

import json
import logging
import sys
from pathlib import Path

import pytest

from kandinsky.core.config.models import LoggingConfig
from kandinsky.core.utils.logging import (
    StructuredJSONFormatter,
    configure_logging,
    configure_logging_from_config,
    get_logger,
)


@pytest.fixture(autouse=True)
def _reset_root_logger():
    """Drop handlers installed by configure_logging."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)


def _record(msg: str, level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="kandinsky.test",
        level=level,
        pathname="/path/to/client.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.funcName = "await_completion"
    record.module = "client"
    return record


class TestStructuredJSONFormatter:
    """Test suite for StructuredJSONFormatter."""

    def test_basic_log_format(self):
        """Test basic log record formatting to JSON."""
        data = json.loads(StructuredJSONFormatter().format(_record("Task done")))

        assert data["level"] == "INFO"
        assert data["message"] == "Task done"
        assert "timestamp" in data
        assert data["context"]["logger_name"] == "kandinsky.test"
        assert data["context"]["module"] == "client"
        assert data["context"]["function"] == "await_completion"
        assert data["context"]["line"] == 42

    def test_log_with_extra_fields(self):
        """Test that extra fields are included in context."""
        record = _record("HTTP response", level=logging.DEBUG)
        record.request_id = "req-123"
        record.status_code = 200
        record.headers = {"X-Key": "***REDACTED***"}

        data = json.loads(StructuredJSONFormatter().format(record))

        assert data["context"]["request_id"] == "req-123"
        assert data["context"]["status_code"] == 200
        assert data["context"]["headers"] == {"X-Key": "***REDACTED***"}

    def test_log_with_exception(self):
        """Test that exception info is captured in context."""
        try:
            raise ValueError("Test error")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(
            StructuredJSONFormatter().format(_record("Failed", logging.ERROR, exc_info))
        )

        assert data["level"] == "ERROR"
        assert data["context"]["error_type"] == "ValueError"
        assert data["context"]["error_message"] == "Test error"
        assert "ValueError: Test error" in data["context"]["stack_trace"]


class TestConfigureLogging:
    """Test suite for configure_logging function."""

    def test_configure_standard_logging(self, capsys):
        """Test standard text logging configuration."""
        configure_logging(level="INFO", structured=False)

        logging.getLogger("test.standard").info("Test message")

        captured = capsys.readouterr()
        assert "Test message" in captured.out
        assert "test.standard" in captured.out
        assert "INFO" in captured.out

    def test_level_is_case_insensitive(self):
        configure_logging(level="debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_structured_logging_to_file(self, tmp_path: Path):
        """Test structured JSON logging to file."""
        log_file = tmp_path / "kandinsky.jsonl"
        configure_logging(level="DEBUG", structured=True, filename=str(log_file))

        logger = logging.getLogger("test.file")
        logger.debug("Debug message")
        logger.warning("Warning message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines() if line]
        assert [line["level"] for line in lines[-2:]] == ["DEBUG", "WARNING"]

    def test_noisy_loggers_suppressed(self):
        configure_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.ERROR
        assert logging.getLogger("httpcore").level == logging.ERROR

    def test_configure_from_config(self, capsys):
        config = LoggingConfig(level="WARNING", format="%(levelname)s|%(message)s")
        configure_logging_from_config(config)

        logging.getLogger("test.config").info("hidden")
        logging.getLogger("test.config").warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "WARNING|shown" in out


class TestGetLogger:
    def test_plain_logger(self):
        assert isinstance(get_logger("kandinsky.plain"), logging.Logger)

    def test_adapter_carries_context(self, capsys):
        configure_logging(level="INFO", structured=True)

        get_logger("kandinsky.ctx", task_uuid="task-1").info("Polling")

        data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert data["context"]["task_uuid"] == "task-1"
