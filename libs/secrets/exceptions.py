"""
Secrets Retrieval Exception Hierarchy.

Every failure surfaced by the retrieval adapter is one of a closed set of
kinds. Each kind has its own exception class so callers can catch precisely,
and each class declares the HTTP status the API boundary should answer with.

Exception hierarchy:
    SecretManagerError (base, status 500)
    ├── SecretNotFoundError - Secret doesn't exist upstream (404)
    ├── SecretAccessError - Caller lacks permission (403)
    ├── SecretDecryptionError - Upstream cannot decrypt the value (500)
    ├── SecretRetrievalError - Any other failure fetching a secret (500)
    │   └── SecretEmptyError - Upstream returned no payload (500)
    └── SecretListError - Any other failure listing secrets (500)

Messages name the offending secret but NEVER include secret values.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds produced by the retrieval adapter."""

    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    DECRYPTION_FAILURE = "decryption_failure"
    EMPTY_SECRET = "empty_secret"
    RETRIEVAL_FAILED = "retrieval_failed"
    LIST_FAILED = "list_failed"


class SecretManagerError(Exception):
    """
    Base exception for all secrets retrieval errors.

    Attributes:
        message: Human-readable error message (MUST NOT include secret value)
        secret_name: Name of the secret involved, None for list operations
        kind: ErrorKind tag for exhaustive matching
        status_code: HTTP status the API boundary responds with

    Example:
        >>> try:
        ...     value = await retriever.fetch("database/password")
        ... except SecretManagerError as e:
        ...     logger.error("Secret error", extra={"secret_name": e.secret_name})
    """

    kind: ErrorKind = ErrorKind.RETRIEVAL_FAILED
    status_code: int = 500

    def __init__(self, message: str, secret_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.secret_name = secret_name

    def __str__(self) -> str:
        return self.message


class SecretNotFoundError(SecretManagerError):
    """
    Raised when the requested secret doesn't exist upstream.

    Common causes:
    - Typo in the secret name
    - Wrong region (AWS_REGION points elsewhere)
    - Secret deleted

    Example:
        >>> raise SecretNotFoundError("db-creds")
        SecretNotFoundError: Secret 'db-creds' not found
    """

    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, secret_name: str) -> None:
        super().__init__(f"Secret '{secret_name}' not found", secret_name)


class SecretAccessError(SecretManagerError):
    """
    Raised when the service identity lacks permission upstream.

    Resolution:
    - Verify credentials: `aws sts get-caller-identity`
    - Grant secretsmanager:GetSecretValue / secretsmanager:ListSecrets

    Pass ``secret_name=None`` for a denied list operation.
    """

    kind = ErrorKind.ACCESS_DENIED
    status_code = 403

    def __init__(self, secret_name: str | None = None) -> None:
        if secret_name is None:
            message = "Access denied to list secrets. Check IAM role permissions."
        else:
            message = f"Access denied to secret '{secret_name}'. Check IAM role permissions."
        super().__init__(message, secret_name)


class SecretDecryptionError(SecretManagerError):
    """Raised when the store cannot decrypt the secret (KMS key issue)."""

    kind = ErrorKind.DECRYPTION_FAILURE

    def __init__(self, secret_name: str) -> None:
        super().__init__(f"Failed to decrypt secret '{secret_name}'", secret_name)


class SecretRetrievalError(SecretManagerError):
    """
    Raised for any other failure while fetching a secret.

    Wraps the upstream message so transient failures (throttling, network
    errors) remain diagnosable.
    """

    kind = ErrorKind.RETRIEVAL_FAILED

    def __init__(self, secret_name: str, reason: str) -> None:
        super().__init__(f"Failed to retrieve secret '{secret_name}': {reason}", secret_name)
        self.reason = reason


class SecretEmptyError(SecretRetrievalError):
    """Raised when the store returns neither a textual nor a binary payload."""

    kind = ErrorKind.EMPTY_SECRET

    def __init__(self, secret_name: str) -> None:
        super().__init__(secret_name, "Secret value is empty")


class SecretListError(SecretManagerError):
    """Raised for any non-permission failure while listing secrets."""

    kind = ErrorKind.LIST_FAILED

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to list secrets: {reason}")
        self.reason = reason
