"""ASGI middleware binding each HTTP request to a trace ID.

The trace ID is read from the ``X-Trace-ID`` request header (or generated),
stored in the logging context for the duration of the request, and echoed in
the response headers, including error responses produced by exception
handlers.

Example:
    >>> app = FastAPI()
    >>> app.add_middleware(TraceIDMiddleware)
"""

from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from libs.common.logging.context import (
    TRACE_ID_HEADER,
    generate_trace_id,
    reset_trace_id,
    set_trace_id,
)


class TraceIDMiddleware:
    """Pure ASGI trace ID middleware (no BaseHTTPMiddleware buffering)."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        header_value = None
        for key, value in scope.get("headers", []):
            if key.decode("latin-1").lower() == TRACE_ID_HEADER.lower():
                header_value = value.decode("latin-1")
                break
        trace_id = header_value or generate_trace_id()
        token = set_trace_id(trace_id)

        async def send_with_trace_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[TRACE_ID_HEADER] = trace_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace_id)
        finally:
            reset_trace_id(token)
