"""Logging setup for services.

Call configure_logging() once at startup; modules then use
``logging.getLogger(__name__)`` as usual and their records come out as JSON
lines on stdout tagged with the service name and current trace ID.

Example:
    >>> configure_logging(service_name="secrets_api", log_level="INFO")
    >>> logging.getLogger(__name__).info("Service started", extra={"port": 3000})
"""

import logging
import sys

from libs.common.logging.context import get_trace_id
from libs.common.logging.formatter import JSONFormatter


class TraceIDFilter(logging.Filter):
    """Stamp every record with the trace ID of the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Install the JSON stdout handler on the root logger.

    Replaces any existing root handlers so repeated calls do not duplicate
    output. Also routes uvicorn's loggers through the root handler.

    Args:
        service_name: Name written into every record's ``service`` field
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        include_context: Emit ``extra`` fields under ``context``

    Returns:
        The configured root logger

    Raises:
        ValueError: If log_level is not a known level name
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter(service_name=service_name, include_context=include_context))
    handler.addFilter(TraceIDFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    return root_logger
