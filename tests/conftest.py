"""
Root conftest for tests.

Provides:
1. FakeSecretStore - in-memory SecretStore recording every upstream call
2. ManualClock - controllable cache clock for TTL tests
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from libs.secrets.cache import SecretCache
from libs.secrets.retriever import SecretRetriever
from libs.secrets.store import SecretPayload, SecretStore, UpstreamError, UpstreamErrorKind


class FakeSecretStore(SecretStore):
    """In-memory upstream double. Unknown names fail with NOT_FOUND."""

    backend = "fake"

    def __init__(self) -> None:
        self.payloads: dict[str, SecretPayload] = {}
        self.errors: dict[str, UpstreamError] = {}
        self.records: list[dict[str, Any]] = []
        self.list_error: UpstreamError | None = None
        self.get_calls: list[str] = []
        self.list_calls: list[int] = []
        self.delay = 0.0
        self.closed = False

    def put(
        self,
        name: str,
        secret_string: str | None = None,
        secret_binary: bytes | str | None = None,
    ) -> None:
        self.payloads[name] = SecretPayload(secret_string=secret_string, secret_binary=secret_binary)
        self.errors.pop(name, None)

    def fail(self, name: str, kind: UpstreamErrorKind, message: str = "upstream failure") -> None:
        self.errors[name] = UpstreamError(kind, message)

    async def get_secret_value(self, secret_id: str) -> SecretPayload:
        self.get_calls.append(secret_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if secret_id in self.errors:
            raise self.errors[secret_id]
        if secret_id not in self.payloads:
            raise UpstreamError(
                UpstreamErrorKind.NOT_FOUND,
                "Secrets Manager can't find the specified secret.",
                code="ResourceNotFoundException",
            )
        return self.payloads[secret_id]

    async def list_secrets(self, max_results: int = 100) -> list[dict[str, Any]]:
        self.list_calls.append(max_results)
        if self.list_error is not None:
            raise self.list_error
        return self.records[:max_results]

    def close(self) -> None:
        self.closed = True


class ManualClock:
    """Cache clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def fake_store() -> FakeSecretStore:
    return FakeSecretStore()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def cache(clock: ManualClock) -> SecretCache:
    return SecretCache(ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture()
def retriever(fake_store: FakeSecretStore, cache: SecretCache) -> SecretRetriever:
    return SecretRetriever(store=fake_store, cache=cache)
