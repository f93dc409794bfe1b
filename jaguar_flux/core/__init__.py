from .cache import CachePolicy, EvictionStrategy, ResultCache
from .queue import Operation, RequestQueue
from .retry import RetryPolicy, is_retryable, with_retry

__all__ = [
    "CachePolicy",
    "EvictionStrategy",
    "Operation",
    "RequestQueue",
    "ResultCache",
    "RetryPolicy",
    "is_retryable",
    "with_retry",
]
