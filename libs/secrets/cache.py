"""
Thread-safe in-memory cache for decoded secret values with TTL freshness.

Architecture:
    - One SecretCache per process, owned by SecretRetriever
    - In-memory only (NO disk persistence for security)
    - Lazy freshness: an entry is fresh iff now - fetched_at < ttl
    - Stale entries are NOT evicted on read; they are only replaced by a
      successful refetch or removed explicitly
    - TTL and clock are injected so tests can drive time deterministically

Example Usage:
    >>> from datetime import timedelta
    >>> cache = SecretCache(ttl=timedelta(minutes=5))
    >>> cache.set("db-creds", StructuredSecret({"user": "a"}))
    >>> cache.get("db-creds")
    StructuredSecret(data={'user': 'a'})
    >>> cache.invalidate("db-creds")
    >>> cache.get("db-creds") is None
    True
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from libs.secrets.values import SecretValue

DEFAULT_CACHE_TTL = timedelta(minutes=5)


def utc_now() -> datetime:
    """Default cache clock."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class CacheEntry:
    """One memoized secret value and the time it was fetched."""

    value: SecretValue
    fetched_at: datetime

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.fetched_at < ttl


class SecretCache:
    """
    Thread-safe in-memory cache mapping secret names to CacheEntry.

    The cache is unbounded: entries are created or overwritten on every
    successful fetch and live until invalidated or the process exits.

    Attributes:
        _entries: Secret name -> CacheEntry
        _ttl: Freshness window (default: 5 minutes)
        _clock: Callable returning the current aware datetime
        _lock: Threading lock for concurrent access protection

    Examples:
        >>> # Deterministic clock for tests
        >>> now = datetime(2024, 1, 1, tzinfo=UTC)
        >>> cache = SecretCache(clock=lambda: now)
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize SecretCache.

        Args:
            ttl: Freshness window for cached entries. Default: 5 minutes.
            clock: Returns the current time. Default: datetime.now(UTC).
        """
        self._entries: dict[str, CacheEntry] = {}
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, name: str) -> SecretValue | None:
        """
        Return the cached value for ``name`` if it is fresh.

        Args:
            name: Secret name

        Returns:
            SecretValue: Cached value if present and fresh
            None: If absent or stale (stale entries stay in place)
        """
        with self._lock:
            entry = self._entries.get(name)
            if entry is None or not entry.is_fresh(self._clock(), self._ttl):
                return None
            return entry.value

    def get_entry(self, name: str) -> CacheEntry | None:
        """Return the raw entry for ``name`` regardless of freshness."""
        with self._lock:
            return self._entries.get(name)

    def set(self, name: str, value: SecretValue) -> None:
        """
        Store ``value`` under ``name`` stamped with the current clock time.

        Overwrites any previous entry (last writer wins).
        """
        with self._lock:
            self._entries[name] = CacheEntry(value=value, fetched_at=self._clock())

    def invalidate(self, name: str) -> None:
        """Remove one entry. Removing an absent name is a no-op."""
        with self._lock:
            self._entries.pop(name, None)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        """Number of entries, stale ones included."""
        with self._lock:
            return len(self._entries)
