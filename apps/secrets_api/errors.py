"""
Error envelope and exception handlers for the Secrets API.

Every failure is answered with:

    {"error": {"message": "...", "statusCode": 404}}

The status comes from the exception's ``status_code`` attribute (the secrets
library declares one per error kind), defaulting to 500. In development the
envelope also carries the formatted ``stack``. Failures are logged here, at
the boundary: 4xx as warnings, 5xx as errors.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.secrets.exceptions import SecretManagerError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Request-level failure raised by route handlers."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_response(
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    exc: BaseException | None = None,
    include_stack: bool = False,
) -> JSONResponse:
    """Build the JSON error envelope."""
    body: dict[str, object] = {"message": message, "statusCode": status_code}
    if include_stack and exc is not None:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=status_code, content={"error": body})


def validation_message(errors: Sequence[Any]) -> str:
    """Flatten pydantic errors into "Invalid request: loc: msg; loc: msg"."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in errors
    )
    return f"Invalid request: {problems}" if problems else "Invalid request"


def _log_failure(request: Request, status_code: int, message: str, exc: BaseException) -> None:
    extra = {"method": request.method, "path": request.url.path, "status_code": status_code}
    if status_code >= 500:
        logger.error(f"Request failed: {message}", extra=extra, exc_info=exc)
    else:
        logger.warning(f"Request failed: {message}", extra=extra)


def register_exception_handlers(app: FastAPI, include_stack: bool = False) -> None:
    """
    Attach the envelope-producing exception handlers to ``app``.

    Args:
        app: FastAPI application
        include_stack: Add tracebacks to error bodies (development only)
    """

    @app.exception_handler(SecretManagerError)
    async def secret_error_handler(request: Request, exc: SecretManagerError) -> JSONResponse:
        _log_failure(request, exc.status_code, exc.message, exc)
        return error_response(exc.message, exc.status_code, exc, include_stack)

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        _log_failure(request, exc.status_code, exc.message, exc)
        return error_response(exc.message, exc.status_code, exc, include_stack)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = validation_message(exc.errors())
        _log_failure(request, status.HTTP_400_BAD_REQUEST, message, exc)
        return error_response(message, status.HTTP_400_BAD_REQUEST, exc, include_stack)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            message = f"Route {target} not found"
        else:
            message = str(exc.detail)
        _log_failure(request, exc.status_code, message, exc)
        return error_response(message, exc.status_code, exc, include_stack)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status_code = getattr(exc, "status_code", None)
        if not isinstance(status_code, int):
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        _log_failure(request, status_code, "Internal Server Error", exc)
        return error_response("Internal Server Error", status_code, exc, include_stack)
