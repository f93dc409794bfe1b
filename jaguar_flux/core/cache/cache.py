from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Mapping
from typing import Any, Final, Generic, TypeVar, cast

from pydantic import BaseModel

from jaguar_flux.logger import get_logger

from .keys import create_key
from .singleflight import SingleFlight
from .stats import CacheStats
from .types import CacheEntry, CacheGetOrSet, CachePolicy, Clock, EvictionStrategy

logger = get_logger(__name__)

T = TypeVar("T")

# Distinguishes "no live entry" from a cached ``None``.
_MISSING: Final = object()


class ResultCache(Generic[T]):
    """In-memory result cache bounded by entry count and entry age.

    Entries are kept in insertion order; re-inserting a key moves it to the
    newest position. Expired entries are only dropped when a read finds them
    or when capacity eviction displaces them, so ``len()`` may include stale
    entries.
    """

    def __init__(
        self,
        *,
        max_size: int = 100,
        ttl_seconds: float = 3600.0,
        strategy: EvictionStrategy | str = EvictionStrategy.OLDEST,
        namespace: str = "results",
        clock: Clock = time.monotonic,
    ) -> None:
        if max_size < 0:
            raise ValueError("max_size must be >= 0")
        self.policy = CachePolicy(
            namespace=namespace,
            ttl_seconds=float(ttl_seconds),
            max_size=max_size,
            strategy=EvictionStrategy(strategy),
        )
        self.stats = CacheStats()
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[T]] = OrderedDict()
        self._singleflight = SingleFlight()

    @classmethod
    def from_policy(cls, policy: CachePolicy, *, clock: Clock = time.monotonic) -> ResultCache:
        return cls(
            max_size=policy.max_size,
            ttl_seconds=policy.ttl_seconds,
            strategy=policy.strategy,
            namespace=policy.namespace,
            clock=clock,
        )

    @staticmethod
    def create_key(params: Mapping[str, Any] | BaseModel) -> str:
        return create_key(params)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> T | None:
        started = time.perf_counter()
        value = self._lookup(key)
        cache_event = "miss" if value is _MISSING else "hit"
        self.stats.increment(cache_event)
        self._log(cache_event, started)
        return None if value is _MISSING else cast(T, value)

    def set(self, key: str, value: T) -> None:
        started = time.perf_counter()
        # Drop first so an overwrite lands at the newest position.
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, created_at=self._clock())
        self.stats.increment("set")
        self._evict()
        self._log("set", started)

    def delete(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._log("delete")

    def clear(self) -> None:
        self._entries.clear()

    def peek_entry(self, key: str) -> CacheEntry[T] | None:
        """Return the live entry for ``key`` without touching its counters."""
        entry = self._entries.get(key)
        if entry is None or self._is_expired(entry, self._clock()):
            return None
        return entry

    async def get_or_set(self, key: str, factory: CacheGetOrSet[T]) -> T:
        """Return the cached value for ``key`` or compute it once.

        Concurrent callers for the same key share one ``factory()`` call.
        Each call counts exactly one hit or miss; failures are not stored.
        """
        value = self._lookup(key)
        if value is not _MISSING:
            self.stats.increment("hit")
            self._log("hit")
            return cast(T, value)

        lock = self._singleflight.acquire(key)
        try:
            async with lock:
                # Another caller may have filled the slot while we waited.
                value = self._lookup(key)
                if value is not _MISSING:
                    self.stats.increment("hit")
                    self._log("hit", waited=True)
                    return cast(T, value)

                self.stats.increment("miss")
                started = time.perf_counter()
                result = await factory()
                self.set(key, result)
                self._log("fill", started)
                return result
        finally:
            self._singleflight.release(key)

    def _lookup(self, key: str) -> T | object:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING

        if self._is_expired(entry, self._clock()):
            self._entries.pop(key, None)
            self.stats.increment("expire")
            return _MISSING

        entry.access_count += 1
        if self.policy.strategy is EvictionStrategy.LRU:
            self._entries.move_to_end(key, last=True)
        return entry.value

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        if self.policy.ttl_seconds <= 0:
            return True
        return now - entry.created_at > self.policy.ttl_seconds

    def _evict(self) -> None:
        evicted = 0
        while len(self._entries) > self.policy.max_size:
            self._entries.pop(self._select_victim())
            evicted += 1

        if evicted:
            self.stats.increment("evict", evicted)
            self._log("evict", count=evicted)

    def _select_victim(self) -> str:
        if self.policy.strategy is EvictionStrategy.LFU:
            # min() keeps the first of equal counts, i.e. the oldest entry.
            return min(self._entries, key=lambda k: self._entries[k].access_count)
        return next(iter(self._entries))

    def _log(self, cache_event: str, started: float | None = None, **extra: object) -> None:
        # Keys embed prompts, so they are never logged.
        if started is not None:
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 3)
        logger.debug(
            "cache",
            namespace=self.policy.namespace,
            cache_event=cache_event,
            strategy=self.policy.strategy.value,
            size=len(self._entries),
            **extra,
        )
