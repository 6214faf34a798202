"""In-memory TTL cache for list and lookup queries.

Keys are namespaced by entity type (``"employees:list:50:0:-"``) so that
a write to one entity type can drop every cached query of that type with a
single prefix invalidation. Staleness is bounded by the entry TTL; the cache
is not a correctness mechanism.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# TTL in seconds per entity type, by volatility
ENTITY_TTL: dict[str, float] = {
    "branches": 600,
    "permission_groups": 600,
    "job_positions": 600,
    "permissions": 300,
    "users": 120,
    "employees": 120,
    "terminations": 120,
    "vacations": 60,
    "advances": 60,
    "payroll": 60,
    "stats": 30,
}


def cache_key(
    entity: str,
    search: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    """Build the list-query key for an entity type.

    The search text goes last, behind a marker, so no search value can
    produce the key of the unfiltered list.
    """
    page = f"{entity}:list:{limit or 50}:{offset or 0}"
    return f"{page}:-" if search is None else f"{page}:q={search}"


@dataclass
class CacheEntry:
    """A cached value with access statistics."""

    value: Any
    stored_at: float
    ttl: float
    hits: int = 0
    last_accessed: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class QueryCache:
    """Bounded TTL cache with prefix invalidation.

    Usage:
        cache = QueryCache(max_size=2000, default_ttl=300)
        rows = await cache.get_or_set("branches:list:50:0:-", load, ttl=600)
        cache.invalidate_prefix("branches:")
    """

    def __init__(
        self,
        max_size: int = 2000,
        default_ttl: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss or expiry."""
        entry = self._entries.get(key)
        now = self._clock()
        if entry is None:
            self.misses += 1
            return None
        if entry.is_expired(now):
            del self._entries[key]
            self.misses += 1
            return None

        entry.hits += 1
        entry.last_accessed = now
        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value. Full caches are cleaned up before insertion."""
        if len(self._entries) >= self.max_size and key not in self._entries:
            self.cleanup()

        now = self._clock()
        previous = self._entries.get(key)
        self._entries[key] = CacheEntry(
            value=value,
            stored_at=now,
            ttl=self.default_ttl if ttl is None else ttl,
            hits=previous.hits if previous else 0,
            last_accessed=now,
        )

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix. Returns the removed count."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug("Invalidated %d cache entries with prefix %r", len(keys), prefix)
        return len(keys)

    def invalidate_entities(self, *entities: str) -> int:
        """Invalidate all cached queries of the given entity types."""
        return sum(self.invalidate_prefix(f"{entity}:") for entity in entities)

    def cleanup(self) -> int:
        """Purge expired entries, then evict least-used ones down to 90% capacity.

        Returns the number of removed entries.
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        removed = len(expired)

        if len(self._entries) >= self.max_size:
            target = int(self.max_size * 0.9)
            by_usage = sorted(
                self._entries.items(),
                key=lambda item: (item[1].hits, item[1].last_accessed),
            )
            for key, _ in by_usage[: len(self._entries) - target]:
                del self._entries[key]
                removed += 1

        if removed:
            logger.debug("Cache cleanup removed %d entries, %d remaining", removed, len(self))
        return removed

    async def get_or_set(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
    ) -> T:
        """Return the cached value for key, loading and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached

        value = await loader()
        self.set(key, value, ttl)
        return value

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        lookups = self.hits + self.misses
        hit_rate = (self.hits / lookups * 100) if lookups else 0.0
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": round(hit_rate, 2),
        }
