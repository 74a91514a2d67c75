"""
Tests for libs/secrets/cache.py - Secret Cache with TTL and injected clock.

Test Organization:
    - TestSecretCacheBasicOperations: Get, set, overwrite, len/contains
    - TestSecretCacheFreshness: TTL boundary behaviour, lazy staleness
    - TestSecretCacheInvalidation: Explicit invalidation and clearing
"""

from datetime import UTC, datetime, timedelta

import pytest

from libs.secrets.cache import DEFAULT_CACHE_TTL, CacheEntry, SecretCache
from libs.secrets.values import RawSecret, StructuredSecret


class TestSecretCacheBasicOperations:
    """Test basic cache operations (get, set, cache hits/misses)."""

    @pytest.mark.unit()
    def test_default_ttl_is_five_minutes(self) -> None:
        assert SecretCache().ttl == timedelta(minutes=5)
        assert DEFAULT_CACHE_TTL == timedelta(minutes=5)

    @pytest.mark.unit()
    def test_get_nonexistent_secret_returns_none(self, cache: SecretCache) -> None:
        assert cache.get("nonexistent/secret") is None

    @pytest.mark.unit()
    def test_set_and_get_secret(self, cache: SecretCache) -> None:
        cache.set("db-creds", StructuredSecret({"user": "a", "pass": "b"}))

        assert cache.get("db-creds") == StructuredSecret({"user": "a", "pass": "b"})

    @pytest.mark.unit()
    def test_set_overwrites_existing_value(self, cache: SecretCache, clock) -> None:
        """Overwriting replaces the value and restamps fetched_at."""
        cache.set("api-token", RawSecret("old"))
        clock.advance(minutes=2)
        cache.set("api-token", RawSecret("new"))

        entry = cache.get_entry("api-token")
        assert entry == CacheEntry(value=RawSecret("new"), fetched_at=clock.now)

    @pytest.mark.unit()
    def test_len_and_contains(self, cache: SecretCache) -> None:
        assert len(cache) == 0
        cache.set("a", RawSecret("1"))
        cache.set("b", RawSecret("2"))

        assert len(cache) == 2
        assert "a" in cache
        assert "c" not in cache


class TestSecretCacheFreshness:
    """Test lazy TTL freshness checks."""

    @pytest.mark.unit()
    def test_entry_fresh_just_before_ttl(self, cache: SecretCache, clock) -> None:
        cache.set("db-creds", RawSecret("v"))
        clock.advance(minutes=4, seconds=59)

        assert cache.get("db-creds") == RawSecret("v")

    @pytest.mark.unit()
    def test_entry_stale_at_exactly_ttl(self, cache: SecretCache, clock) -> None:
        """Fresh iff age < TTL, so age == TTL is stale."""
        cache.set("db-creds", RawSecret("v"))
        clock.advance(minutes=5)

        assert cache.get("db-creds") is None

    @pytest.mark.unit()
    def test_stale_entry_is_not_evicted_by_read(self, cache: SecretCache, clock) -> None:
        cache.set("db-creds", RawSecret("v"))
        clock.advance(hours=1)

        assert cache.get("db-creds") is None
        assert len(cache) == 1
        assert cache.get_entry("db-creds").value == RawSecret("v")

    @pytest.mark.unit()
    def test_custom_ttl(self, clock) -> None:
        cache = SecretCache(ttl=timedelta(seconds=30), clock=clock)
        cache.set("short", RawSecret("v"))
        clock.advance(seconds=31)

        assert cache.get("short") is None

    @pytest.mark.unit()
    def test_cache_entry_is_fresh(self) -> None:
        fetched = datetime(2024, 1, 1, tzinfo=UTC)
        entry = CacheEntry(value=RawSecret("v"), fetched_at=fetched)

        assert entry.is_fresh(fetched + timedelta(seconds=10), timedelta(minutes=1))
        assert not entry.is_fresh(fetched + timedelta(minutes=1), timedelta(minutes=1))


class TestSecretCacheInvalidation:
    """Test explicit invalidation and clearing."""

    @pytest.mark.unit()
    def test_invalidate_removes_entry(self, cache: SecretCache) -> None:
        cache.set("db-creds", RawSecret("v"))
        cache.invalidate("db-creds")

        assert cache.get("db-creds") is None
        assert "db-creds" not in cache

    @pytest.mark.unit()
    def test_invalidate_missing_name_is_noop(self, cache: SecretCache) -> None:
        cache.set("other", RawSecret("v"))

        cache.invalidate("never-cached")

        assert len(cache) == 1
        assert cache.get("other") == RawSecret("v")

    @pytest.mark.unit()
    def test_clear_removes_all_entries(self, cache: SecretCache) -> None:
        cache.set("a", RawSecret("1"))
        cache.set("b", RawSecret("2"))

        cache.clear()
        cache.clear()

        assert len(cache) == 0
