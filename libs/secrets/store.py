"""
Upstream secret store interface.

The retrieval adapter depends on exactly two upstream operations:

    get_secret_value(secret_id) -> SecretPayload
    list_secrets(max_results)   -> list of metadata records

Backends translate their SDK-specific failures into UpstreamError, tagged with
a closed UpstreamErrorKind, at this boundary. Nothing above this module ever
inspects SDK error codes.

Architecture:
    SecretStore (ABC)
    ├── AWSSecretStore - AWS Secrets Manager via boto3 (aws_backend.py)
    └── EnvSecretStore - Local .env / environment fallback (env_backend.py)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class UpstreamErrorKind(str, Enum):
    """Failure categories the store distinguishes."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    DECRYPTION_FAILURE = "decryption_failure"
    OTHER = "other"


class UpstreamError(Exception):
    """
    Failure reported by a SecretStore backend.

    Attributes:
        kind: UpstreamErrorKind category
        message: Upstream error message (never contains secret values)
        code: Backend-specific error code, if any (e.g. "ThrottlingException")
    """

    def __init__(self, kind: UpstreamErrorKind, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code


@dataclass(frozen=True)
class SecretPayload:
    """
    Raw GetSecretValue payload.

    At most one of the fields is normally set. ``secret_binary`` is bytes when
    the SDK already base64-decoded it, or the base64 wire string otherwise.
    """

    secret_string: str | None = None
    secret_binary: bytes | str | None = None


class SecretStore(ABC):
    """
    Abstract base class for upstream secret stores.

    Implementations:
        - AWSSecretStore: AWS Secrets Manager
        - EnvSecretStore: Local .env fallback (local development only)

    Contract:
        - Methods are coroutines; blocking SDK calls MUST NOT run on the loop
        - Failures MUST be raised as UpstreamError
        - No caching and no retries (SecretRetriever owns caching)
    """

    backend: str = "unknown"

    @abstractmethod
    async def get_secret_value(self, secret_id: str) -> SecretPayload:
        """
        Fetch the current value of one secret.

        Raises:
            UpstreamError: Secret missing, access denied, undecryptable, or other
        """

    @abstractmethod
    async def list_secrets(self, max_results: int = 100) -> list[dict[str, Any]]:
        """
        Return up to ``max_results`` secret metadata records (never values).

        Raises:
            UpstreamError: Access denied or other failure
        """

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
