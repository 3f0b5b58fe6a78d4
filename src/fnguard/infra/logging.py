"""Logging bootstrap for fnguard's own debug events.

The decorators log through ``logging.getLogger(__name__)`` under the
``fnguard`` namespace and never touch handlers themselves.  The events are:

* ``fnguard.concurrency.limit``: a call was queued at capacity (with the
  queue depth), and a queued invocation failed.
* ``fnguard.concurrency.coalesce``: a call joined an in-flight key, and a
  shared invocation failed.

``setup_logging`` attaches one handler to the ``fnguard`` logger, so the
host's root logger is left alone.  Output is either JSON lines
(``json_output=True``) or a compact line per event.  When the host has
OpenTelemetry tracing active, each record carries the ``trace_id`` and
``span_id`` of the call that emitted it.
"""

from __future__ import annotations

import logging
import sys

from opentelemetry import trace

from fnguard.configs.config import get_app_config
from fnguard.configs.system import LoggingConfig


class _TraceContextFilter(logging.Filter):
    """Injects OTEL trace/span IDs into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        span = trace.get_current_span()
        ctx = span.get_span_context()
        if ctx and ctx.is_valid:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


LOGGER_NAME = "fnguard"

_DEV_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)-5s [%(name)s] %(message)s"
_DEV_DATEFMT = "%H:%M:%S"


def setup_logging(config: LoggingConfig | None = None) -> logging.Handler:
    """Route fnguard's log records to stdout (call once at startup).

    Replaces any handler a previous call installed.  Returns the new handler
    so callers can redirect or remove it.
    """
    if config is None:
        config = get_app_config().logging

    level = config.level.upper()
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(_TraceContextFilter())

    formatter: logging.Formatter
    if config.json_output:
        from pythonjsonlogger.json import JsonFormatter

        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s "
            "%(trace_id)s %(span_id)s",
            rename_fields={
                "asctime": "timestamp",
                "levelname": "level",
                "name": "logger",
            },
            defaults={"trace_id": "", "span_id": ""},
        )
    else:
        formatter = logging.Formatter(fmt=_DEV_FORMAT, datefmt=_DEV_DATEFMT)

    handler.setFormatter(formatter)

    package_logger.handlers = [handler]
    package_logger.propagate = False
    return handler
