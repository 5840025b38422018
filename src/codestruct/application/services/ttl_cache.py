"""In-memory TTL cache for catalog entries.

Read-through helper in front of the store. Entries expire after their TTL;
when max_size is reached the entry closest to expiry is evicted first.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Cache counters.

    Attributes:
        hits: Lookups answered from the cache
        misses: Lookups not answered (absent or expired)
        size: Entries currently held, expired ones included until touched
    """

    hits: int
    misses: int
    size: int

    @property
    def hit_rate(self) -> float:
        """Hits over total lookups, 0.0 when nothing was looked up."""
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


@dataclass
class TTLCache(Generic[V]):
    """Key -> value with per-entry expiry.

    Not thread-safe: callers serialize access.

    Attributes:
        ttl_seconds: Default lifetime for put()
        max_size: Entry limit, None = unbounded
        clock: Monotonic seconds source
        _entries: key -> (expires_at, value)
    """

    ttl_seconds: float = 300.0
    max_size: int | None = None
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, tuple[float, V]] = field(default_factory=dict)
    _hits: int = 0
    _misses: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {self.ttl_seconds}")
        if self.max_size is not None and self.max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {self.max_size}")

    def get(self, key: str) -> V | None:
        """Value if present and not expired.

        Expired entries are dropped on access.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        expires_at, value = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            self._misses += 1
            return None

        self._hits += 1
        return value

    def put(self, key: str, value: V, ttl: float | None = None) -> None:
        """Insert or replace an entry.

        Args:
            key: Cache key
            value: Value to hold
            ttl: Lifetime in seconds, defaults to ttl_seconds
        """
        lifetime = self.ttl_seconds if ttl is None else ttl
        if lifetime <= 0:
            raise ValueError(f"ttl must be > 0, got {lifetime}")

        if key not in self._entries and self.max_size is not None:
            while len(self._entries) >= self.max_size:
                self._evict_one()
        self._entries[key] = (self.clock() + lifetime, value)

    def invalidate(self, key: str) -> None:
        """Drop one entry (no-op if absent)."""
        self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        """Drop every entry. Counters are kept."""
        self._entries.clear()

    def _evict_one(self) -> None:
        """Remove the entry with the earliest expiry."""
        victim = min(self._entries, key=lambda k: self._entries[k][0])
        del self._entries[victim]

    def __contains__(self, key: object) -> bool:
        """Key present and not expired. Does not touch counters."""
        entry = self._entries.get(key) if isinstance(key, str) else None
        return entry is not None and self.clock() < entry[0]

    def __len__(self) -> int:
        """Entries held."""
        return len(self._entries)

    def stats(self) -> CacheStats:
        """Snapshot of counters."""
        return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
