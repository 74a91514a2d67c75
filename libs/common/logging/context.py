"""Request trace IDs carried in a context variable.

Each HTTP request gets a trace ID (from the ``X-Trace-ID`` header or freshly
generated) that every log record emitted while serving it carries, including
records from worker threads started with ``asyncio.to_thread``, which copies
the current context.

Example:
    >>> set_trace_id("req-42")
    >>> get_trace_id()
    'req-42'
"""

import contextvars
import uuid

_trace_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)

TRACE_ID_HEADER = "X-Trace-ID"


def generate_trace_id() -> str:
    """Return a new UUID4 trace ID."""
    return str(uuid.uuid4())


def get_trace_id() -> str | None:
    return _trace_id_var.get()


def set_trace_id(trace_id: str) -> contextvars.Token[str | None]:
    """
    Set the trace ID for the current context.

    Returns:
        Token that reset_trace_id() uses to restore the previous value

    Raises:
        ValueError: If trace_id is empty
    """
    if not trace_id:
        raise ValueError("Trace ID cannot be empty")
    return _trace_id_var.set(trace_id)


def reset_trace_id(token: contextvars.Token[str | None]) -> None:
    """Restore the trace ID that was current before set_trace_id()."""
    _trace_id_var.reset(token)
