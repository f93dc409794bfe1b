from __future__ import annotations

import asyncio
from dataclasses import dataclass


@dataclass(slots=True)
class _Gate:
    lock: asyncio.Lock
    refcount: int


class SingleFlight:
    """Per-key asyncio locks, dropped once the last holder releases."""

    def __init__(self) -> None:
        self._gates: dict[str, _Gate] = {}

    def acquire(self, key: str) -> asyncio.Lock:
        gate = self._gates.get(key)
        if gate is None:
            gate = _Gate(lock=asyncio.Lock(), refcount=0)
            self._gates[key] = gate
        gate.refcount += 1
        return gate.lock

    def release(self, key: str) -> None:
        gate = self._gates.get(key)
        if gate is None:
            return
        gate.refcount -= 1
        if gate.refcount <= 0:
            self._gates.pop(key, None)

    def __len__(self) -> int:
        return len(self._gates)
