"""
Request/Response schemas for the Secrets API.

Defines Pydantic models for API validation, serialization and the OpenAPI docs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

BATCH_NAMES_REQUIRED = 'Request body must include a "names" array with at least one secret name'

# =============================================================================
# Request Models
# =============================================================================


class BatchSecretsRequest(BaseModel):
    """Body of POST /secrets/batch."""

    names: list[str] = Field(..., min_length=1, description="Secret names to retrieve")
    use_cache: bool = Field(True, alias="useCache", description="Serve fresh cached values")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"names": ["my-secret-1", "my-secret-2"], "useCache": True}},
    )


# =============================================================================
# Response Models
# =============================================================================


class SecretListResponse(BaseModel):
    """Response for GET /secrets (metadata only, never values)."""

    secrets: list[dict[str, Any]] = Field(
        ..., description="Secret metadata records (Name, ARN, Description, LastChangedDate)"
    )
    count: int = Field(..., description="Number of records returned")


class SecretValueResponse(BaseModel):
    """Response for GET /secrets/{name}."""

    name: str = Field(..., description="Secret name as requested")
    value: dict[str, Any] | list[Any] | str = Field(
        ..., description="Parsed JSON document, or the raw string when not JSON"
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "db-creds", "value": {"user": "a", "pass": "b"}}}
    )


class BatchSecretsResponse(BaseModel):
    """Response for POST /secrets/batch. ``errors`` is omitted when every fetch succeeded."""

    secrets: dict[str, Any] = Field(..., description="Secret name -> value")
    errors: dict[str, str] | None = Field(None, description="Secret name -> error message")


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str
    uptime_seconds: float


class ErrorDetail(BaseModel):
    message: str
    statusCode: int
    stack: str | None = None


class ErrorResponse(BaseModel):
    """Envelope returned for every failure."""

    error: ErrorDetail
