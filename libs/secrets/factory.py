"""
Factory for creating SecretStore / SecretRetriever instances from configuration.

Backend selection:
    - backend="aws" → AWSSecretStore (production)
    - backend="env" → EnvSecretStore (local development only)

Production Guardrails:
    - EnvSecretStore is ONLY allowed when the deployment environment is
      "local", "development" or "test"
    - Unknown backend names raise SecretManagerError

Example Usage:
    >>> retriever = create_secret_retriever(backend="aws", region_name="eu-west-1")
    >>> value = await retriever.fetch("db-creds")
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from libs.secrets.aws_backend import AWSSecretStore
from libs.secrets.cache import DEFAULT_CACHE_TTL, SecretCache, utc_now
from libs.secrets.env_backend import EnvSecretStore
from libs.secrets.exceptions import SecretManagerError
from libs.secrets.retriever import SecretRetriever
from libs.secrets.store import SecretStore

logger = logging.getLogger(__name__)

LOCAL_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"local", "development", "test"})


def create_secret_store(
    backend: str = "aws",
    deployment_env: str = "production",
    region_name: str = "us-east-1",
    dotenv_path: str | Path | None = None,
    connect_timeout: float = 5,
    read_timeout: float = 30,
) -> SecretStore:
    """
    Create the upstream SecretStore for ``backend``.

    Args:
        backend: "aws" or "env" (case-insensitive)
        deployment_env: Deployment environment name, checked by the env guardrail
        region_name: AWS region (aws backend)
        dotenv_path: Optional .env file (env backend)
        connect_timeout: botocore connect timeout in seconds (aws backend)
        read_timeout: botocore read timeout in seconds (aws backend)

    Raises:
        SecretManagerError: Unknown backend, or env backend outside local environments
    """
    selected_backend = backend.lower().strip() or "aws"
    selected_env = deployment_env.lower().strip()

    if selected_backend == "aws":
        return AWSSecretStore(
            region_name=region_name,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )

    if selected_backend == "env":
        if selected_env not in LOCAL_ENVIRONMENTS:
            raise SecretManagerError(
                f"EnvSecretStore not allowed in {selected_env} environment. "
                f"Plain-text .env secrets are for local development only; "
                f"use SECRET_BACKEND='aws'."
            )
        logger.warning(
            "Using EnvSecretStore: secrets served from .env/environment",
            extra={"deployment_env": selected_env},
        )
        return EnvSecretStore(dotenv_path=dotenv_path)

    raise SecretManagerError(
        f"Invalid SECRET_BACKEND: '{selected_backend}'. Valid options: 'aws', 'env'."
    )


def create_secret_retriever(
    store: SecretStore | None = None,
    cache_ttl: timedelta = DEFAULT_CACHE_TTL,
    clock: Callable[[], datetime] = utc_now,
    coalesce: bool = True,
    **store_kwargs: object,
) -> SecretRetriever:
    """
    Build a SecretRetriever with its own cache.

    Args:
        store: Pre-built store. If None, one is created via create_secret_store()
        cache_ttl: Cache freshness window (default: 5 minutes)
        clock: Cache clock (tests inject a controllable one)
        coalesce: Share in-flight upstream fetches for the same name
        **store_kwargs: Forwarded to create_secret_store()
    """
    if store is None:
        store = create_secret_store(**store_kwargs)  # type: ignore[arg-type]
    cache = SecretCache(ttl=cache_ttl, clock=clock)
    logger.info(
        "Secret retriever initialized",
        extra={
            "backend": store.backend,
            "cache_ttl_seconds": cache_ttl.total_seconds(),
            "coalesce": coalesce,
        },
    )
    return SecretRetriever(store=store, cache=cache, coalesce=coalesce)
