from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
V = TypeVar("V")

CacheNamespace: TypeAlias = str

Clock: TypeAlias = Callable[[], float]


class EvictionStrategy(str, Enum):
    """Which entry is displaced when the cache grows past its maximum size."""

    OLDEST = "oldest"
    LRU = "lru"
    LFU = "lfu"


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    created_at: float
    access_count: int = 1


CacheGetOrSet: TypeAlias = Callable[[], Awaitable[V]]


@dataclass(frozen=True, slots=True)
class CachePolicy:
    namespace: CacheNamespace = "results"
    ttl_seconds: float = 3600.0
    max_size: int = 100
    strategy: EvictionStrategy = EvictionStrategy.OLDEST
