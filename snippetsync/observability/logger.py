# snippetsync/observability/logger.py

# structured JSON logger
import logging
import os
import sys

from opentelemetry import trace
from pythonjsonlogger.json import JsonFormatter

from snippetsync import config


class TraceIdFilter(logging.Filter):
    """Inject trace_id into the record if a span is active."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            ctx = trace.get_current_span().get_span_context()
            record.trace_id = f"{ctx.trace_id:032x}" if ctx and ctx.trace_id else None
        return True


def _build_formatter() -> logging.Formatter:
    return JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(pathname)s %(lineno)d %(trace_id)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )


def configure_logging(settings) -> None:
    """Configure root logging and align the file loggers to JSON formatting.

    - Reuses the access/error file handlers from utils.logger, switched to JSON.
    - Adds a JSON console handler (stdout) on the root logger, once.
    - Injects trace_id when tracing is enabled.
    """
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    formatter = _build_formatter()
    trace_filter = TraceIdFilter()

    os.makedirs(config.LOGS_PATH, exist_ok=True)

    for logger_name in ("access", "error"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(logging.INFO if logger_name == "access" else logging.ERROR)
        lg.propagate = False  # keep file routing stable
        for h in lg.handlers:
            h.setFormatter(formatter)
            if not any(isinstance(f, TraceIdFilter) for f in h.filters):
                h.addFilter(trace_filter)

    have_console = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout
        for h in root.handlers
    )
    if not have_console:
        console = logging.StreamHandler(stream=sys.stdout)
        console.setLevel(level)
        console.setFormatter(formatter)
        console.addFilter(trace_filter)
        root.addHandler(console)

    logging.getLogger("startup").info("logging configured")
