"""
Environment Variable Secret Store Backend.

This module implements EnvSecretStore, a local development SecretStore that
serves secrets from a .env file and the process environment, so the API can
run without AWS credentials. It MUST NOT be used in production.

Lookup order for a secret name:
    1. Exact key in the loaded .env file
    2. Exact name in os.environ
    3. Normalized name in os.environ ("db-creds" / "app/db" -> DB_CREDS / APP_DB)

Listing returns metadata for the keys of the loaded .env file only, so the rest
of the process environment is never enumerated over HTTP.

Usage Example:
    >>> store = EnvSecretStore(dotenv_path=".env")
    >>> payload = await store.get_secret_value("db-creds")
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from libs.secrets.store import SecretPayload, SecretStore, UpstreamError, UpstreamErrorKind

logger = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9]+")


def env_var_name(secret_name: str) -> str:
    """
    Convert a secret name to environment variable form.

    Example:
        >>> env_var_name("prod/db-creds")
        'PROD_DB_CREDS'
    """
    return _NON_IDENTIFIER.sub("_", secret_name).strip("_").upper()


class EnvSecretStore(SecretStore):
    """
    Local development secret store.

    **WARNING**: LOCAL DEVELOPMENT ONLY. The factory refuses this backend
    outside local/development/test environments.

    Example:
        >>> store = EnvSecretStore(dotenv_path=".env.local")
        >>> await store.list_secrets()
        [{'Name': 'DB_CREDS', 'Description': 'Loaded from .env.local'}]
    """

    backend = "env"

    def __init__(self, dotenv_path: str | Path | None = None) -> None:
        """
        Initialize EnvSecretStore.

        Args:
            dotenv_path: Optional .env file to load. Values are read into this
                         store only; os.environ is not modified.

        Raises:
            UpstreamError: dotenv_path is given but the file doesn't exist
        """
        self._dotenv_path = Path(dotenv_path) if dotenv_path is not None else None
        self._values: dict[str, str] = {}

        if self._dotenv_path is not None:
            if not self._dotenv_path.is_file():
                raise UpstreamError(
                    UpstreamErrorKind.OTHER,
                    f".env file not found: {self._dotenv_path}",
                )
            self._values = {
                key: value
                for key, value in dotenv_values(self._dotenv_path).items()
                if value is not None
            }
            logger.info(
                "Loaded .env file for local secrets",
                extra={"dotenv_path": str(self._dotenv_path), "count": len(self._values)},
            )

    def _lookup(self, secret_id: str) -> str | None:
        if secret_id in self._values:
            return self._values[secret_id]
        if secret_id in os.environ:
            return os.environ[secret_id]
        return os.environ.get(env_var_name(secret_id))

    async def get_secret_value(self, secret_id: str) -> SecretPayload:
        value = self._lookup(secret_id)
        if value is None:
            raise UpstreamError(
                UpstreamErrorKind.NOT_FOUND,
                f"Environment variable not set: {env_var_name(secret_id)}",
            )
        return SecretPayload(secret_string=value)

    async def list_secrets(self, max_results: int = 100) -> list[dict[str, Any]]:
        source = str(self._dotenv_path) if self._dotenv_path else "environment"
        return [
            {"Name": name, "Description": f"Loaded from {source}"}
            for name in sorted(self._values)[:max_results]
        ]
