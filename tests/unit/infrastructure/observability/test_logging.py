"""Tests for structured logging."""

import json
import logging
import sys

from streamtoshelf.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def make_record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="streamtoshelf.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        result = set_correlation_id("req-123")
        assert result == "req-123"
        assert get_correlation_id() == "req-123"

    def test_generates_uuid_when_missing(self):
        """Test that None or empty generates a UUID."""
        generated = set_correlation_id(None)
        assert len(generated) == 36
        assert get_correlation_id() == generated
        assert set_correlation_id("") != ""

    def test_filter_attaches_correlation_id(self):
        set_correlation_id("req-456")
        record = make_record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "req-456"


class TestFormatters:
    def test_json_formatter_adds_fields(self):
        set_correlation_id("req-789")
        record = make_record("Spotify search returned 429")
        CorrelationIdFilter().filter(record)
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "Spotify search returned 429"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "streamtoshelf.test"
        assert payload["correlation_id"] == "req-789"
        assert payload["line"] == 10

    def test_compact_formatter_prints_chain_root_cause_first(self):
        try:
            try:
                raise ValueError("inner problem")
            except ValueError as inner:
                raise RuntimeError("outer problem") from inner
        except RuntimeError:
            exc_info = sys.exc_info()

        text = CompactExceptionFormatter().formatException(exc_info)

        assert text.index("ValueError: inner problem") < text.index("RuntimeError: outer problem")

    def test_compact_formatter_without_exception(self):
        assert CompactExceptionFormatter().formatException((None, None, None)) == ""


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_info_level(self):
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() == logging.INFO

    def test_json_format_installs_json_formatter(self):
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        handlers = logging.getLogger().handlers

        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, CustomJsonFormatter)

    def test_repeated_configuration_does_not_stack_handlers(self):
        configure_logging(log_level="INFO")
        configure_logging(log_level="INFO")

        assert len(logging.getLogger().handlers) == 1

    def test_noisy_loggers_are_quieted(self):
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
