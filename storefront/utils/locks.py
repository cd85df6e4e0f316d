"""Keyed asyncio locks for read-modify-write sections"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable
import asyncio

class KeyedLock:
    """One asyncio.Lock per key, dropped again once nobody holds or waits on it"""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        key = str(key)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
