"""Tests for the logging bootstrap."""

import json
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider
from pythonjsonlogger.json import JsonFormatter

from fnguard.configs.system import LoggingConfig
from fnguard.infra.logging import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    package_logger = logging.getLogger(LOGGER_NAME)
    saved = package_logger.handlers[:], package_logger.level, package_logger.propagate
    yield
    package_logger.handlers, level, package_logger.propagate = saved
    package_logger.setLevel(level)


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="fnguard.concurrency.limit",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestSetupLogging:
    def test_installs_single_handler(self):
        handler = setup_logging(LoggingConfig(level="debug"))

        package_logger = logging.getLogger(LOGGER_NAME)
        assert package_logger.handlers == [handler]
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False

    def test_leaves_root_logger_alone(self):
        root = logging.getLogger()
        before = root.handlers[:]

        setup_logging(LoggingConfig())

        assert root.handlers == before

    def test_repeated_setup_replaces_handler(self):
        first = setup_logging(LoggingConfig())
        second = setup_logging(LoggingConfig(json_output=True))

        assert logging.getLogger(LOGGER_NAME).handlers == [second]
        assert first is not second

    def test_reads_app_config_by_default(self, monkeypatch):
        monkeypatch.setenv("FNGUARD_LOGGING__LEVEL", "WARNING")

        setup_logging()

        assert logging.getLogger(LOGGER_NAME).level == logging.WARNING

    def test_human_readable_format(self):
        handler = setup_logging(LoggingConfig(json_output=False))
        record = _record("queued call")
        handler.filter(record)

        line = handler.format(record)

        assert " INFO  " in line
        assert "[fnguard.concurrency.limit]" in line
        assert line.endswith("queued call")

    def test_json_format_without_span(self):
        handler = setup_logging(LoggingConfig(json_output=True))
        assert isinstance(handler.formatter, JsonFormatter)
        record = _record("queued call")
        handler.filter(record)

        payload = json.loads(handler.format(record))

        assert payload["message"] == "queued call"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "fnguard.concurrency.limit"
        assert payload["trace_id"] == ""

    def test_json_format_inside_span(self):
        handler = setup_logging(LoggingConfig(json_output=True))
        tracer = TracerProvider().get_tracer("tests")

        with tracer.start_as_current_span("work") as span:
            record = _record("admitted")
            handler.filter(record)
            expected = format(span.get_span_context().trace_id, "032x")

        payload = json.loads(handler.format(record))
        assert payload["trace_id"] == expected
        assert len(payload["span_id"]) == 16
