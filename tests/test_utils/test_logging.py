"""Tests for the structured logging utilities."""

import logging
import time
from unittest.mock import MagicMock, patch

from checkin_workbook.utils.logging import (
    LogContext,
    PerformanceMetrics,
    StructuredLogFormatter,
    StructuredLogger,
    clear_context,
    configure_logging,
    get_extra_context,
    get_logger,
    get_request_id,
    set_extra_context,
    set_request_id,
    timed_operation,
)


def _record(msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestContextVariables:
    """Tests for context variable management."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_request_id_default_none(self) -> None:
        assert get_request_id() is None

    def test_set_and_get_request_id(self) -> None:
        set_request_id("req-123")
        assert get_request_id() == "req-123"

    def test_extra_context_default_empty(self) -> None:
        assert get_extra_context() == {}

    def test_set_and_get_extra_context(self) -> None:
        ctx = {"operation": "export", "sheet": "Guests"}
        set_extra_context(ctx)
        assert get_extra_context() == ctx

    def test_clear_context(self) -> None:
        set_request_id("req-123")
        set_extra_context({"key": "value"})

        clear_context()

        assert get_request_id() is None
        assert get_extra_context() == {}


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics class."""

    def test_initialization(self) -> None:
        metrics = PerformanceMetrics(operation="clone")
        assert metrics.operation == "clone"
        assert metrics.duration_seconds == 0.0
        assert metrics.sheets_processed == 0
        assert metrics.cells_processed == 0
        assert metrics.cells_written == 0
        assert metrics.fallbacks == 0
        assert metrics.custom_metrics == {}

    def test_finish_calculates_duration(self) -> None:
        metrics = PerformanceMetrics(operation="clone")
        time.sleep(0.01)
        metrics.finish()
        assert metrics.duration_seconds > 0
        assert metrics.end_time is not None

    def test_to_dict_with_all_fields(self) -> None:
        metrics = PerformanceMetrics(operation="encode")
        metrics.duration_seconds = 2.0
        metrics.sheets_processed = 2
        metrics.cells_processed = 40
        metrics.cells_written = 12
        metrics.fallbacks = 1
        metrics.custom_metrics = {"book_type": "xlsx"}

        result = metrics.to_dict()
        assert result["sheets_processed"] == 2
        assert result["cells_processed"] == 40
        assert result["cells_written"] == 12
        assert result["fallbacks"] == 1
        assert result["custom_metrics"]["book_type"] == "xlsx"

    def test_to_dict_excludes_zero_values(self) -> None:
        metrics = PerformanceMetrics(operation="encode")
        metrics.duration_seconds = 1.0
        result = metrics.to_dict()
        assert result == {"operation": "encode", "duration_seconds": 1.0}


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def setup_method(self) -> None:
        self.logger = get_logger("test_logger")

    def test_get_logger_returns_structured_logger(self) -> None:
        assert isinstance(get_logger(__name__), StructuredLogger)

    def test_logger_property(self) -> None:
        assert isinstance(self.logger.logger, logging.Logger)

    def test_build_message_without_kwargs(self) -> None:
        assert self.logger._build_message("Test message") == "Test message"

    def test_build_message_with_kwargs(self) -> None:
        msg = self.logger._build_message("Sheet decoded", sheet="Guests", cells=42)
        assert msg == "Sheet decoded | sheet=Guests, cells=42"

    @patch.object(logging.Logger, "info")
    def test_info_logging(self, mock_info: MagicMock) -> None:
        self.logger.info("Test info", status="ok")
        mock_info.assert_called_once()
        call_args = mock_info.call_args[0][0]
        assert "Test info" in call_args
        assert "status=ok" in call_args

    @patch.object(logging.Logger, "warning")
    def test_warning_logging(self, mock_warning: MagicMock) -> None:
        self.logger.warning("Test warning")
        mock_warning.assert_called_once()

    @patch.object(logging.Logger, "error")
    def test_error_logging(self, mock_error: MagicMock) -> None:
        self.logger.error("Test error", exc_info=False)
        mock_error.assert_called_once()

    @patch.object(logging.Logger, "exception")
    def test_exception_logging(self, mock_exception: MagicMock) -> None:
        self.logger.exception("Test exception")
        mock_exception.assert_called_once()

    @patch.object(logging.Logger, "info")
    def test_log_performance(self, mock_info: MagicMock) -> None:
        metrics = PerformanceMetrics(operation="decode")
        metrics.duration_seconds = 1.5
        metrics.sheets_processed = 3
        self.logger.log_performance(metrics)
        mock_info.assert_called_once()
        call_args = mock_info.call_args[0][0]
        assert "Performance: decode" in call_args
        assert "sheets_processed=3" in call_args


class TestLogContext:
    """Tests for LogContext context manager."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_context_sets_values(self) -> None:
        with LogContext(sheet="Guests", operation="export"):
            extra = get_extra_context()
            assert extra == {"sheet": "Guests", "operation": "export"}

    def test_context_restores_values(self) -> None:
        set_extra_context({"original": "value"})

        with LogContext(operation="export"):
            assert get_extra_context()["original"] == "value"

        assert get_extra_context() == {"original": "value"}

    def test_context_with_request_id(self) -> None:
        with LogContext(request_id="req-456", sheet="Guests"):
            assert get_request_id() == "req-456"
            assert "request_id" not in get_extra_context()

        assert get_request_id() is None

    def test_nested_contexts(self) -> None:
        with LogContext(sheet="outer"):
            with LogContext(sheet="inner"):
                assert get_extra_context()["sheet"] == "inner"
            assert get_extra_context()["sheet"] == "outer"


class TestTimedOperation:
    """Tests for timed_operation context manager."""

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_metrics(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        with timed_operation(logger, "clone") as metrics:
            metrics.cells_processed = 100

        mock_log.assert_called_once()
        logged_metrics = mock_log.call_args[0][0]
        assert logged_metrics.operation == "clone"
        assert logged_metrics.cells_processed == 100
        assert logged_metrics.end_time is not None

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_on_error(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        try:
            with timed_operation(logger, "encode"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        mock_log.assert_called_once()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_string_level(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_with_int_level(self) -> None:
        configure_logging(level=logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

    def test_configure_with_structured_formatter(self) -> None:
        configure_logging(use_structured_formatter=True)
        handler = logging.getLogger().handlers[0]
        assert isinstance(handler.formatter, StructuredLogFormatter)

    def test_configure_without_structured_formatter(self) -> None:
        configure_logging(use_structured_formatter=False)
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, StructuredLogFormatter)


class TestStructuredLogFormatter:
    """Tests for StructuredLogFormatter class."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_format_without_context(self) -> None:
        formatter = StructuredLogFormatter("%(message)s")
        assert formatter.format(_record()) == "Test message"

    def test_format_with_request_id(self) -> None:
        set_request_id("req-123")
        formatter = StructuredLogFormatter("%(message)s")
        assert formatter.format(_record()) == "[request_id=req-123] Test message"

    def test_format_with_extra_context(self) -> None:
        set_extra_context({"sheet": "Guests"})
        formatter = StructuredLogFormatter("%(message)s")
        result = formatter.format(_record())
        assert "sheet=Guests" in result

    def test_format_restores_original_message(self) -> None:
        set_request_id("req-123")
        record = _record()
        StructuredLogFormatter("%(message)s").format(record)
        assert record.msg == "Test message"
