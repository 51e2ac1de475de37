"""Per-key asyncio locks serializing mutations of one aggregate."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from weakref import WeakValueDictionary

logger = logging.getLogger(__name__)


class LockRegistry:
    """
    Hands out one asyncio.Lock per key (``order:<id>``, ``payment:<id>``).

    Locks are held weakly and disappear once no coroutine references them.
    This serializes writers inside one process; the version column in the
    database covers writers in other processes.

    Lock order when both are needed: payment, then order.
    """

    def __init__(self):
        self._locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self.get(key)
        if lock.locked():
            logger.debug(f"Waiting for lock {key}")
        async with lock:
            yield

    def order(self, order_id: str):
        return self.hold(f"order:{order_id}")

    def payment(self, payment_id: str):
        return self.hold(f"payment:{payment_id}")

    def store(self, store_id: str):
        return self.hold(f"store:{store_id}")
