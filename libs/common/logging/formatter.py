"""JSON log formatter.

Every record becomes one JSON line:

    {
        "timestamp": "2025-10-21T10:30:00.000Z",
        "level": "INFO",
        "service": "secrets_api",
        "trace_id": "abc123-def456",
        "logger": "libs.secrets.retriever",
        "message": "Secret cache miss, fetching upstream",
        "context": {"secret_name": "db-creds"}
    }

``context`` holds the record's ``extra`` fields (or an explicit ``context``
dict). Callers pass secret names there, never secret values.
"""

import json
import logging
import traceback
from datetime import UTC, datetime
from typing import Any

# Attributes every LogRecord has; anything else came from ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "trace_id", "context", "taskName"}


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON.

    Attributes:
        service_name: Value of the ``service`` field
        include_context: Emit ``extra`` fields under ``context``

    Example:
        >>> handler = logging.StreamHandler()
        >>> handler.setFormatter(JSONFormatter(service_name="secrets_api"))
    """

    def __init__(self, service_name: str, include_context: bool = True) -> None:
        super().__init__()
        self.service_name = service_name
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.format_timestamp(record.created),
            "level": record.levelname,
            "service": self.service_name,
            "trace_id": getattr(record, "trace_id", None),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context = self.extract_context(record)
            if context:
                entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        return json.dumps(entry, default=str)

    @staticmethod
    def format_timestamp(created: float) -> str:
        """ISO 8601 UTC with millisecond precision, e.g. 2023-10-21T10:30:00.000Z."""
        dt = datetime.fromtimestamp(created, tz=UTC)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    @staticmethod
    def extract_context(record: logging.LogRecord) -> dict[str, Any] | None:
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            return dict(context)

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        return extra or None
