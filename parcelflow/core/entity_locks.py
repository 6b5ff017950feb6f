"""
Per-entity locks

Every read-validate-write sequence on an order, shipment or invoice runs
while holding that entity's lock. Locks for different entities never block
each other. A task that already holds a key may enter it again, so a
cascade holding the order and shipment locks can call into the services
that take the same locks.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

logger = logging.getLogger(__name__)


def order_key(order_id: str) -> str:
    return f"order:{order_id}"


def shipment_key(shipment_id: str) -> str:
    return f"shipment:{shipment_id}"


def invoice_key(invoice_id: str) -> str:
    return f"invoice:{invoice_id}"


class EntityLockRegistry:
    """Hands out one asyncio.Lock per entity key"""

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._owners: Dict[str, asyncio.Task] = {}

    def lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block"""
        task = asyncio.current_task()
        if task is not None and self._owners.get(key) is task:
            yield
            return

        async with self.lock_for(key):
            self._owners[key] = task
            logger.debug(f"Acquired lock {key}")
            try:
                yield
            finally:
                self._owners.pop(key, None)
                logger.debug(f"Released lock {key}")

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()
