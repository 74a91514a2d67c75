"""
AWS Secrets Manager upstream store.

This module implements AWSSecretStore, the production SecretStore backed by
AWS Secrets Manager via boto3.

Architecture:
    - boto3 client for the Secrets Manager API (default credential chain:
      IAM role on EC2/ECS, or AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY)
    - Blocking SDK calls run on a worker thread (asyncio.to_thread)
    - ClientError codes are mapped to UpstreamErrorKind at this boundary
    - Timeouts come from botocore's Config; no retry layer of our own

IAM Permissions Required:
    - secretsmanager:GetSecretValue
    - secretsmanager:ListSecrets
    - kms:Decrypt on the secret's KMS key (customer-managed keys only)

Usage Example:
    >>> store = AWSSecretStore(region_name="us-east-1")
    >>> payload = await store.get_secret_value("prod/database/password")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from libs.secrets.store import SecretPayload, SecretStore, UpstreamError, UpstreamErrorKind

logger = logging.getLogger(__name__)

_ERROR_CODE_KINDS: dict[str, UpstreamErrorKind] = {
    "ResourceNotFoundException": UpstreamErrorKind.NOT_FOUND,
    "AccessDeniedException": UpstreamErrorKind.ACCESS_DENIED,
    "AccessDenied": UpstreamErrorKind.ACCESS_DENIED,
    "UnrecognizedClientException": UpstreamErrorKind.ACCESS_DENIED,
    "DecryptionFailure": UpstreamErrorKind.DECRYPTION_FAILURE,
    "DecryptionFailureException": UpstreamErrorKind.DECRYPTION_FAILURE,
}


def _to_upstream_error(exc: ClientError | BotoCoreError) -> UpstreamError:
    """
    Translate a boto3/botocore exception into an UpstreamError.

    Unknown error codes (throttling, InternalServiceError, ...) and SDK-level
    errors (network, credentials resolution) become UpstreamErrorKind.OTHER.
    """
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message") or code
        kind = _ERROR_CODE_KINDS.get(code, UpstreamErrorKind.OTHER)
        return UpstreamError(kind, message, code=code)
    return UpstreamError(UpstreamErrorKind.OTHER, str(exc))


class AWSSecretStore(SecretStore):
    """
    AWS Secrets Manager backend.

    Features:
        - IAM role-based authentication via the default credential chain
        - Non-blocking: SDK calls are offloaded to a thread
        - Error codes translated to UpstreamErrorKind

    Example:
        >>> store = AWSSecretStore(region_name="eu-west-1", read_timeout=10)
        >>> records = await store.list_secrets(max_results=20)
        >>> [r["Name"] for r in records]
        ['prod/database/password', 'prod/api/token']
    """

    backend = "aws"

    def __init__(
        self,
        region_name: str = "us-east-1",
        client: Any | None = None,
        connect_timeout: float = 5,
        read_timeout: float = 30,
    ) -> None:
        """
        Initialize AWSSecretStore.

        Args:
            region_name: AWS region (e.g., "us-east-1")
            client: Pre-built secretsmanager client (tests, custom sessions).
                    If None, one is created with boto3.client().
            connect_timeout: Socket connect timeout in seconds
            read_timeout: Socket read timeout in seconds

        Raises:
            UpstreamError: boto3 could not build the client (bad region, etc.)
        """
        self._region_name = region_name
        if client is not None:
            self._client = client
            return

        try:
            self._client = boto3.client(
                "secretsmanager",
                region_name=region_name,
                config=Config(connect_timeout=connect_timeout, read_timeout=read_timeout),
            )
        except BotoCoreError as e:
            raise _to_upstream_error(e) from e

        logger.info(
            "AWS Secrets Manager client initialized",
            extra={"region": region_name, "backend": self.backend},
        )

    @property
    def region_name(self) -> str:
        return self._region_name

    async def get_secret_value(self, secret_id: str) -> SecretPayload:
        """
        Fetch one secret value from AWS Secrets Manager.

        Args:
            secret_id: Secret name or ARN

        Returns:
            SecretPayload carrying SecretString and/or SecretBinary

        Raises:
            UpstreamError: NOT_FOUND, ACCESS_DENIED, DECRYPTION_FAILURE or OTHER
        """
        try:
            response = await asyncio.to_thread(self._client.get_secret_value, SecretId=secret_id)
        except (ClientError, BotoCoreError) as e:
            raise _to_upstream_error(e) from e

        return SecretPayload(
            secret_string=response.get("SecretString"),
            secret_binary=response.get("SecretBinary"),
        )

    async def list_secrets(self, max_results: int = 100) -> list[dict[str, Any]]:
        """
        List secret metadata (Name, ARN, Description, LastChangedDate, ...).

        Only the first page is returned; ``max_results`` bounds its size.

        Raises:
            UpstreamError: ACCESS_DENIED or OTHER
        """
        try:
            response = await asyncio.to_thread(self._client.list_secrets, MaxResults=max_results)
        except (ClientError, BotoCoreError) as e:
            raise _to_upstream_error(e) from e

        records: list[dict[str, Any]] = response.get("SecretList") or []
        logger.debug(
            "Listed secrets from AWS Secrets Manager",
            extra={"count": len(records), "backend": self.backend},
        )
        return records
