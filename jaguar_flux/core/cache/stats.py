from __future__ import annotations


class CacheStats:
    """Per-cache event counters, shaped as {cache_event: count}."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def increment(self, cache_event: str, amount: int = 1) -> None:
        """Increment a cache event counter."""
        self._counts[cache_event] = self._counts.get(cache_event, 0) + amount

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the current counters."""
        return dict(self._counts)

    def reset(self) -> None:
        self._counts.clear()
