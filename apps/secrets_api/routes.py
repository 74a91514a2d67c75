"""
FastAPI routes for the Secrets API.

Endpoints:
- GET /secrets - List secret metadata (never values)
- GET /secrets/{name} - Get one secret value
- POST /secrets/batch - Get several secret values in parallel
- GET /health - Liveness check
"""

from __future__ import annotations

import logging
import re
import time
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from libs.secrets.retriever import DEFAULT_MAX_RESULTS, SecretRetriever

from .errors import APIError, validation_message
from .schemas import (
    BATCH_NAMES_REQUIRED,
    BatchSecretsRequest,
    BatchSecretsResponse,
    ErrorResponse,
    HealthResponse,
    SecretListResponse,
    SecretValueResponse,
)

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# =============================================================================
# Router Setup
# =============================================================================


router = APIRouter(prefix="/secrets", tags=["Secrets"])
health_router = APIRouter(tags=["Health"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "Access denied"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Server error"},
}


def get_retriever(request: Request) -> SecretRetriever:
    """Get the process-wide SecretRetriever.

    Raises:
        APIError 503: If the retriever is not initialized.
    """
    retriever: SecretRetriever | None = getattr(request.app.state, "retriever", None)
    if retriever is None:
        raise APIError("Secret retriever not initialized", status.HTTP_503_SERVICE_UNAVAILABLE)
    return retriever


def parse_max_results(raw: str | None) -> int:
    """Lenient integer parse: leading digits are used, anything unusable means 100."""
    if raw is None:
        return DEFAULT_MAX_RESULTS
    match = _LEADING_INT.match(raw)
    if match is None:
        return DEFAULT_MAX_RESULTS
    value = int(match.group(1))
    return value if value > 0 else DEFAULT_MAX_RESULTS


# =============================================================================
# Secrets
# =============================================================================


@router.get("", response_model=SecretListResponse, responses=_ERROR_RESPONSES)
@router.get("/", response_model=SecretListResponse, include_in_schema=False)
async def list_secrets(
    retriever: Annotated[SecretRetriever, Depends(get_retriever)],
    max_results: Annotated[
        str | None,
        Query(alias="maxResults", description="Maximum number of secrets to return (default 100)"),
    ] = None,
) -> SecretListResponse:
    """List secret metadata (names, ARNs, descriptions), never values."""
    records = await retriever.list_secrets(parse_max_results(max_results))
    return SecretListResponse(secrets=records, count=len(records))


@router.post(
    "/batch",
    response_model=BatchSecretsResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Missing names array"},
        **_ERROR_RESPONSES,
    },
)
async def get_secrets_batch(
    retriever: Annotated[SecretRetriever, Depends(get_retriever)],
    payload: Annotated[Any, Body()] = None,
) -> JSONResponse:
    """Retrieve several secrets in parallel; per-name failures are reported in ``errors``."""
    try:
        batch = BatchSecretsRequest.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        # an empty loc means the body itself is not an object
        if any(not err["loc"] or err["loc"][0] == "names" for err in errors):
            raise APIError(BATCH_NAMES_REQUIRED, status.HTTP_400_BAD_REQUEST) from e
        raise APIError(validation_message(errors), status.HTTP_400_BAD_REQUEST) from e

    result = await retriever.fetch_many(batch.names, use_cache=batch.use_cache)
    if result.errors:
        logger.warning(
            "Batch secret retrieval had failures",
            extra={"requested": len(batch.names), "failed": sorted(result.errors)},
        )
    return JSONResponse(content=result.to_dict())


@router.get(
    "/{name:path}",
    response_model=SecretValueResponse,
    responses={
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Secret not found"},
        **_ERROR_RESPONSES,
    },
)
async def get_secret(
    name: str,
    retriever: Annotated[SecretRetriever, Depends(get_retriever)],
    use_cache: Annotated[
        str | None,
        Query(alias="useCache", description="Set to 'false' to bypass the cache"),
    ] = None,
) -> SecretValueResponse:
    """Retrieve one secret value by name or ARN (URL-encode names containing '/')."""
    value = await retriever.fetch(name, use_cache=use_cache != "false")
    return SecretValueResponse(name=name, value=value.to_json())


# =============================================================================
# Health
# =============================================================================


@health_router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness check; does not call the secret store."""
    started = getattr(request.app.state, "started_monotonic", time.monotonic())
    return HealthResponse(
        status="healthy",
        service="secrets_api",
        timestamp=datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        uptime_seconds=round(time.monotonic() - started, 3),
    )
