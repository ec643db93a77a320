"""Bounded least-recently-used cache shared by the memoizing wrappers."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

from lru_memoize.errors import InvalidCapacityError

K = TypeVar("K")
V = TypeVar("V")

DEFAULT_CAPACITY = 1000

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheInfo:
    """Point-in-time counters for one cache."""

    hits: int
    misses: int
    evictions: int
    size: int
    capacity: int


def validate_capacity(capacity: object) -> int:
    """Return `capacity` if it is a positive int, else raise InvalidCapacityError."""
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise InvalidCapacityError(f"capacity must be a positive integer, got {capacity!r}")
    if capacity < 1:
        raise InvalidCapacityError(f"capacity must be a positive integer, got {capacity}")
    return capacity


class LRUCache(Generic[K, V]):
    """A deterministic LRU cache with thread-safe membership and store steps.

    The underlying ``OrderedDict`` doubles as the recency list: the first
    item is the least recently touched and is evicted first. Reads and writes
    both move a key to the end.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Initialize cache with positive capacity."""
        self.capacity = validate_capacity(capacity)
        self._items: OrderedDict[K, V] = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def keys(self) -> list[K]:
        """Return stored keys from least to most recently used."""
        with self._lock:
            return list(self._items)

    def info(self) -> CacheInfo:
        """Snapshot hit/miss/eviction counters."""
        with self._lock:
            return CacheInfo(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._items),
                capacity=self.capacity,
            )

    def try_get(self, key: K) -> tuple[bool, V | None]:
        """Return ``(True, value)`` and refresh recency on hit, ``(False, None)`` on miss."""
        with self._lock:
            if key not in self._items:
                self._misses += 1
                return False, None
            self._items.move_to_end(key)
            self._hits += 1
            return True, self._items[key]

    def put(self, key: K, value: V) -> None:
        """Insert or overwrite `key` as most recently used, evicting one entry on overflow."""
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            if len(self._items) > self.capacity:
                evicted, _ = self._items.popitem(last=False)
                self._evictions += 1
                logger.debug(
                    "evicted least recently used key %s (capacity=%d)", evicted, self.capacity
                )

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Get cached value or create/store via `compute`.

        `compute` runs outside the lock; if it raises, nothing is stored.
        """
        found, value = self.try_get(key)
        if found:
            return value  # type: ignore[return-value]

        value = compute()
        self.put(key, value)
        return value

    async def get_or_compute_async(self, key: K, compute: Callable[[], Awaitable[V]]) -> V:
        """Awaitable counterpart of `get_or_compute`.

        The membership check and the store happen on either side of the
        await, so a cancelled or failed computation leaves the cache as it was.
        """
        found, value = self.try_get(key)
        if found:
            return value  # type: ignore[return-value]

        value = await compute()
        self.put(key, value)
        return value
