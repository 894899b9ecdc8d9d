"""Caller-side caching of issued tokens."""

from __future__ import annotations

import fnmatch
import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from mediatoken.config import DEFAULT_REFRESH_MARGIN
from mediatoken.errors import InvalidResourceError
from mediatoken.tokens.codec import DEFAULT_LIFETIME_MINUTES, GenerateResult, TokenCodec, clamp_lifetime
from mediatoken.tokens.models import IssuedToken
from mediatoken.utils.urls import normalize_resource

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 1000
DEFAULT_TTL = 5 * 60


class TokenCache(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...

    def clear(self) -> None: ...


@dataclass(slots=True)
class CacheEntry:
    value: Any
    stored_at: float
    ttl: float
    hits: int = 0

    def expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl


@dataclass(slots=True)
class CacheStats:
    total_items: int
    total_hits: int
    total_misses: int
    hit_rate: float


class MemoryTokenCache:
    """In-process cache with per-entry TTL and least-used eviction."""

    def __init__(self, *, max_size: int = DEFAULT_MAX_SIZE, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                return None
            entry.hits += 1
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict()
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_matching(self, pattern: str) -> int:
        with self._lock:
            doomed = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
            for key in doomed:
                del self._entries[key]
        logger.debug("Deleted %s cache entries matching %s", len(doomed), pattern)
        return len(doomed)

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            doomed = [key for key, entry in self._entries.items() if entry.expired(now)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Cleaned up %s expired cache entries", len(doomed))
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            rate = round(self._hits / total * 100, 2) if total else 0.0
            return CacheStats(
                total_items=len(self._entries),
                total_hits=self._hits,
                total_misses=self._misses,
                hit_rate=rate,
            )

    def _evict(self) -> None:
        # Caller holds the lock. Fewest hits goes first, oldest breaks ties.
        victim = min(self._entries, key=lambda key: (self._entries[key].hits, self._entries[key].stored_at))
        del self._entries[victim]
        logger.debug("Evicted cache entry %s", victim)


class CachedIssuer:
    """Reuse issued tokens until they come within ``refresh_margin`` of expiry.

    Cached values are the immutable :class:`IssuedToken` records; a refresh
    or a request for a different lifetime replaces the entry. Failures are returned but never stored.
    """

    def __init__(
        self,
        codec: TokenCodec,
        cache: TokenCache | None = None,
        *,
        refresh_margin: int = DEFAULT_REFRESH_MARGIN,
    ) -> None:
        self.codec = codec
        self.cache = cache if cache is not None else MemoryTokenCache()
        self.refresh_margin = refresh_margin

    def issue(self, resource: str, lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES) -> GenerateResult:
        try:
            key = normalize_resource(resource)
        except InvalidResourceError:
            return self.codec.generate(resource, lifetime_minutes)
        minutes = clamp_lifetime(lifetime_minutes)
        cached = self.cache.get(key)
        now = self.codec.now()
        if (
            isinstance(cached, IssuedToken)
            and cached.lifetime_minutes == minutes
            and cached.expires - now > self.refresh_margin
        ):
            logger.debug("Using cached token for %s", key)
            return cached
        result = self.codec.generate(resource, minutes)
        if isinstance(result, IssuedToken):
            ttl = max(result.expires - now - self.refresh_margin, 1)
            self.cache.set(result.resource, result, ttl)
        return result

    def issue_many(
        self, resources: Iterable[str], lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES
    ) -> list[GenerateResult]:
        return [self.issue(resource, lifetime_minutes) for resource in resources]
