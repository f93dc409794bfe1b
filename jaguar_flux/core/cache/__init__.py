from .cache import ResultCache
from .keys import canonical_json, create_key
from .stats import CacheStats
from .types import CacheEntry, CacheGetOrSet, CacheNamespace, CachePolicy, EvictionStrategy

__all__ = [
    "CacheEntry",
    "CacheGetOrSet",
    "CacheNamespace",
    "CachePolicy",
    "CacheStats",
    "EvictionStrategy",
    "ResultCache",
    "canonical_json",
    "create_key",
]
