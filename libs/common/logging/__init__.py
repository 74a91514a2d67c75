"""Structured JSON logging with request trace IDs.

Usage:
    # At service startup
    from libs.common.logging import TraceIDMiddleware, configure_logging
    configure_logging(service_name="secrets_api", log_level="INFO")
    app.add_middleware(TraceIDMiddleware)

    # Anywhere
    logger = logging.getLogger(__name__)
    logger.info("Secret cache hit", extra={"secret_name": name})
"""

from libs.common.logging.config import TraceIDFilter, configure_logging
from libs.common.logging.context import (
    TRACE_ID_HEADER,
    generate_trace_id,
    get_trace_id,
    reset_trace_id,
    set_trace_id,
)
from libs.common.logging.formatter import JSONFormatter
from libs.common.logging.middleware import TraceIDMiddleware

__all__ = [
    # Configuration
    "configure_logging",
    "TraceIDFilter",
    # Trace ID management
    "TRACE_ID_HEADER",
    "generate_trace_id",
    "get_trace_id",
    "set_trace_id",
    "reset_trace_id",
    # Middleware / formatter
    "TraceIDMiddleware",
    "JSONFormatter",
]
