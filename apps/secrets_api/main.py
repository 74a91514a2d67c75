"""
FastAPI application for the Secrets API service.

This service provides REST API endpoints for:
- Secret metadata listing
- Single secret retrieval (cached for 5 minutes)
- Parallel batch retrieval

Configuration via environment variables (see config.py):
- AWS_REGION: Region of the AWS Secrets Manager endpoint
- SECRET_BACKEND: "aws" (default) or "env" (local development)
- CORS_ORIGIN: Allowed origins

Example:
    Start the service:
        $ uvicorn apps.secrets_api.main:app --host 0.0.0.0 --port 3000

    Get a secret:
        $ curl http://localhost:3000/secrets/db-creds
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.common.logging import TraceIDMiddleware, configure_logging
from libs.secrets.factory import create_secret_retriever
from libs.secrets.retriever import SecretRetriever

from .config import Settings, get_settings
from .errors import register_exception_handlers
from .middleware import SecurityHeadersMiddleware
from .routes import health_router, router

SERVICE_NAME = "secrets_api"
API_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def build_retriever(settings: Settings) -> SecretRetriever:
    """Create the process-wide retriever from settings."""
    return create_secret_retriever(
        cache_ttl=settings.cache_ttl,
        coalesce=settings.coalesce_fetches,
        backend=settings.secret_backend,
        deployment_env=settings.environment,
        region_name=settings.aws_region,
        dotenv_path=settings.secret_dotenv_path,
        connect_timeout=settings.aws_connect_timeout,
        read_timeout=settings.aws_read_timeout,
    )


def create_app(
    settings: Settings | None = None,
    retriever: SecretRetriever | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use. Default: get_settings() (environment).
        retriever: Pre-built retriever (tests inject one over a fake store).
                   If None, one is built from settings at startup.

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Secrets API starting",
            extra={
                "environment": settings.environment,
                "backend": settings.secret_backend,
                "region": settings.aws_region,
                "port": settings.port,
            },
        )
        if getattr(app.state, "retriever", None) is None:
            app.state.retriever = build_retriever(settings)
        try:
            yield
        finally:
            app.state.retriever.invalidate_all()
            app.state.retriever.store.close()
            logger.info("Secrets API shutting down, cache cleared")

    app = FastAPI(
        title="AWS Secrets Manager API",
        description="REST API for reading secrets from AWS Secrets Manager with in-memory caching",
        version=API_VERSION,
        docs_url="/api-docs",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.retriever = retriever
    app.state.started_monotonic = time.monotonic()

    # Middleware (last added runs first)
    credentials = "*" not in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(TraceIDMiddleware)

    register_exception_handlers(app, include_stack=settings.is_development)

    app.include_router(health_router)
    app.include_router(router)

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, Any]:
        """Root endpoint with service information."""
        return {
            "message": "AWS Secrets Manager API",
            "version": API_VERSION,
            "documentation": "/api-docs",
        }

    return app


def _create_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(service_name=SERVICE_NAME, log_level=settings.log_level)
    return create_app(settings)


app = _create_default_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "apps.secrets_api.main:app",
        host=_settings.host,
        port=_settings.port,
        log_level=_settings.log_level.lower(),
    )
