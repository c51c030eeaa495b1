"""
Per-key asyncio locks.

Serializes critical sections that touch the same key (tenant-month for
summary refreshes, tenant/contact for alert throttling) while letting
different keys proceed without contention.
"""
import asyncio
from collections.abc import Hashable
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyedLock:
    """
    Lazily created lock per key, dropped once no coroutine holds or awaits it.

    Usage:
        locks = KeyedLock()
        async with locks.hold(("tenant-1", "2025-06")):
            ...
    """

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
