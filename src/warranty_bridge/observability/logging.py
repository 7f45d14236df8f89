from __future__ import annotations

import logging
import sys
from typing import TextIO

from opentelemetry import trace

_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_TRACE_FORMAT = "%(asctime)s [%(trace_id)s/%(span_id)s] %(name)s %(levelname)s %(message)s"

# httpx logs every request line at INFO, including the token endpoint.
_NOISY_LOGGERS = ("httpx", "httpcore")


class TraceContextFilter(logging.Filter):
    """Logging filter that injects OTel trace/span IDs into log records.

    Adds ``trace_id`` and ``span_id`` attributes to every log record so a
    failed lookup in the logs can be matched to its vendor request span.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = trace.get_current_span().get_span_context()
        if ctx and ctx.trace_id:
            record.trace_id = format(ctx.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(ctx.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = ""  # type: ignore[attr-defined]
            record.span_id = ""  # type: ignore[attr-defined]
        return True


def configure_logging(
    level: str = "INFO",
    *,
    include_trace_context: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure root logging for the server process.

    Args:
        level: Logging level name (e.g. ``"INFO"``, ``"DEBUG"``).
        include_trace_context: Whether to add trace/span IDs to log records.
        stream: Output stream (defaults to ``sys.stderr``; stdout belongs to
            the MCP stdio transport).
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stderr)
    if include_trace_context:
        handler.setFormatter(logging.Formatter(_TRACE_FORMAT))
        handler.addFilter(TraceContextFilter())
    else:
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
