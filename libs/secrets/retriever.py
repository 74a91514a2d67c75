"""
Caching secret retrieval adapter.

SecretRetriever sits between the HTTP API and the upstream SecretStore. It
serves fresh values from SecretCache, otherwise fetches from the store,
decodes the payload into a SecretValue, refreshes the cache, and maps every
upstream failure onto the closed error taxonomy in libs.secrets.exceptions.

Concurrency:
    - Cooperative (asyncio); the store offloads blocking I/O
    - Fetches for different names never contend
    - With coalesce=True (default) concurrent cache-miss fetches for the same
      name share one in-flight upstream call and its result or error
    - A use_cache=False fetch always starts its own upstream call; cached
      fetches arriving while it runs share it
    - With coalesce=False every caller issues its own upstream call and the
      last successful writer wins the cache entry
    - fetch_many fans out one fetch per name with no concurrency cap

The adapter raises but does not log failures; the API boundary does.

Example:
    >>> retriever = SecretRetriever(store=AWSSecretStore(), cache=SecretCache())
    >>> value = await retriever.fetch("db-creds")
    >>> value
    StructuredSecret(data={'user': 'a', 'pass': 'b'})
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from libs.secrets.cache import SecretCache
from libs.secrets.exceptions import (
    SecretAccessError,
    SecretDecryptionError,
    SecretListError,
    SecretManagerError,
    SecretNotFoundError,
    SecretRetrievalError,
)
from libs.secrets.store import SecretStore, UpstreamError, UpstreamErrorKind
from libs.secrets.values import SecretValue, decode_payload

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 100


@dataclass
class BatchResult:
    """
    Outcome of fetch_many.

    Attributes:
        secrets: name -> decoded value for every name that succeeded
        errors: name -> error message for every name that failed
    """

    secrets: dict[str, SecretValue] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; ``errors`` is omitted when nothing failed."""
        result: dict[str, Any] = {
            "secrets": {name: value.to_json() for name, value in self.secrets.items()}
        }
        if self.errors:
            result["errors"] = dict(self.errors)
        return result


def _fetch_error(secret_name: str, exc: UpstreamError) -> SecretManagerError:
    if exc.kind is UpstreamErrorKind.NOT_FOUND:
        return SecretNotFoundError(secret_name)
    if exc.kind is UpstreamErrorKind.ACCESS_DENIED:
        return SecretAccessError(secret_name)
    if exc.kind is UpstreamErrorKind.DECRYPTION_FAILURE:
        return SecretDecryptionError(secret_name)
    return SecretRetrievalError(secret_name, exc.message)


def _list_error(exc: UpstreamError) -> SecretManagerError:
    if exc.kind is UpstreamErrorKind.ACCESS_DENIED:
        return SecretAccessError()
    return SecretListError(exc.message)


class SecretRetriever:
    """
    Fetch-or-serve-from-cache access to an upstream SecretStore.

    Construct once per process and share by reference; the cache it owns must
    not be mutated by anything else.

    Args:
        store: Upstream SecretStore
        cache: SecretCache owned by this retriever
        coalesce: Share one in-flight upstream call among concurrent fetches
                  of the same name
    """

    def __init__(self, store: SecretStore, cache: SecretCache, coalesce: bool = True) -> None:
        self._store = store
        self._cache = cache
        self._coalesce = coalesce
        self._in_flight: dict[str, asyncio.Future[SecretValue]] = {}

    @property
    def store(self) -> SecretStore:
        return self._store

    @property
    def cache(self) -> SecretCache:
        return self._cache

    async def fetch(self, name: str, use_cache: bool = True) -> SecretValue:
        """
        Return the decoded value of secret ``name``.

        Args:
            name: Secret name or ARN
            use_cache: Serve a fresh cached value without an upstream call.
                       False always goes upstream (and still refreshes the cache).

        Returns:
            StructuredSecret or RawSecret

        Raises:
            SecretNotFoundError: Secret doesn't exist upstream
            SecretAccessError: Permission denied
            SecretDecryptionError: Upstream cannot decrypt the value
            SecretEmptyError: Upstream returned no payload
            SecretRetrievalError: Any other upstream failure
        """
        if use_cache:
            cached = self._cache.get(name)
            if cached is not None:
                logger.debug("Secret cache hit", extra={"secret_name": name})
                return cached

        if not self._coalesce:
            return await self._load(name)

        # a bypass never joins a fetch that started before it; later callers join the bypass
        pending = self._in_flight.get(name) if use_cache else None
        if pending is None:
            pending = asyncio.ensure_future(self._load(name))
            self._in_flight[name] = pending
            pending.add_done_callback(lambda done, key=name: self._forget(key, done))
        else:
            logger.debug("Joining in-flight secret fetch", extra={"secret_name": name})
        # cancelling one waiter leaves the shared fetch running for the others
        return await asyncio.shield(pending)

    def _forget(self, name: str, done: asyncio.Future[SecretValue]) -> None:
        if self._in_flight.get(name) is done:
            del self._in_flight[name]
        if not done.cancelled():
            # mark the error retrieved even if every waiter was cancelled
            done.exception()

    async def _load(self, name: str) -> SecretValue:
        logger.debug("Secret cache miss, fetching upstream", extra={"secret_name": name})
        try:
            payload = await self._store.get_secret_value(name)
        except UpstreamError as e:
            raise _fetch_error(name, e) from e

        try:
            value = decode_payload(name, payload.secret_string, payload.secret_binary)
        except ValueError as e:
            raise SecretRetrievalError(name, str(e)) from e

        self._cache.set(name, value)
        return value

    async def list_secrets(self, max_results: int = DEFAULT_MAX_RESULTS) -> list[dict[str, Any]]:
        """
        List secret metadata records. Always a live call, never cached.

        Raises:
            SecretAccessError: Permission denied
            SecretListError: Any other upstream failure
        """
        try:
            return await self._store.list_secrets(max_results)
        except UpstreamError as e:
            raise _list_error(e) from e

    async def fetch_many(self, names: Iterable[str], use_cache: bool = True) -> BatchResult:
        """
        Fetch several secrets concurrently.

        Every name is attempted; one failure never aborts or affects the others.
        Returns once all fetches have settled.

        Example:
            >>> result = await retriever.fetch_many(["A", "B"])
            >>> result.to_dict()
            {'secrets': {'A': 'value-a'}, 'errors': {'B': "Secret 'B' not found"}}
        """
        unique_names = list(dict.fromkeys(names))
        outcomes = await asyncio.gather(
            *(self.fetch(name, use_cache) for name in unique_names),
            return_exceptions=True,
        )

        result = BatchResult()
        for name, outcome in zip(unique_names, outcomes, strict=True):
            if isinstance(outcome, SecretManagerError):
                result.errors[name] = outcome.message
            elif isinstance(outcome, Exception):
                result.errors[name] = str(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.secrets[name] = outcome
        return result

    def invalidate(self, name: str) -> None:
        """Drop the cached entry for ``name`` (no-op if absent)."""
        self._cache.invalidate(name)

    def invalidate_all(self) -> None:
        """Drop every cached entry."""
        self._cache.clear()
