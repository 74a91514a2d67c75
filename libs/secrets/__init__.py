"""
Secrets Retrieval Library.

Caching adapter in front of an external secret store (AWS Secrets Manager).

Architecture:
    - SecretRetriever: fetch / list_secrets / fetch_many / invalidate (retriever.py)
    - SecretCache: in-memory cache, 5-minute TTL, injected clock (cache.py)
    - SecretValue: StructuredSecret | RawSecret decoded payloads (values.py)
    - SecretStore: upstream interface, AWSSecretStore / EnvSecretStore backends
    - Factory: create_secret_retriever() wires store + cache

Quick Start:
    >>> from libs.secrets import create_secret_retriever
    >>> retriever = create_secret_retriever(backend="aws", region_name="us-east-1")
    >>> value = await retriever.fetch("db-creds")
    >>> batch = await retriever.fetch_many(["db-creds", "api-token"])

Security Requirements:
    - Secret values NEVER logged (only names)
    - Cache is in-memory only, discarded at process exit
"""

from libs.secrets.aws_backend import AWSSecretStore
from libs.secrets.cache import CacheEntry, SecretCache
from libs.secrets.env_backend import EnvSecretStore
from libs.secrets.exceptions import (
    ErrorKind,
    SecretAccessError,
    SecretDecryptionError,
    SecretEmptyError,
    SecretListError,
    SecretManagerError,
    SecretNotFoundError,
    SecretRetrievalError,
)
from libs.secrets.factory import create_secret_retriever, create_secret_store
from libs.secrets.retriever import BatchResult, SecretRetriever
from libs.secrets.store import SecretPayload, SecretStore, UpstreamError, UpstreamErrorKind
from libs.secrets.values import RawSecret, SecretValue, StructuredSecret

__all__ = [
    # Core adapter
    "SecretRetriever",
    "BatchResult",
    # Factory (recommended for most use cases)
    "create_secret_retriever",
    "create_secret_store",
    # Values
    "SecretValue",
    "StructuredSecret",
    "RawSecret",
    # Cache
    "SecretCache",
    "CacheEntry",
    # Upstream stores
    "SecretStore",
    "SecretPayload",
    "UpstreamError",
    "UpstreamErrorKind",
    "AWSSecretStore",
    "EnvSecretStore",
    # Exceptions (callers should catch these)
    "ErrorKind",
    "SecretManagerError",
    "SecretNotFoundError",
    "SecretAccessError",
    "SecretDecryptionError",
    "SecretEmptyError",
    "SecretRetrievalError",
    "SecretListError",
]
