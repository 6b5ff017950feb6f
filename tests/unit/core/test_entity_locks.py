"""
Unit Tests for per-entity locks
"""

import asyncio

import pytest

from parcelflow.core.entity_locks import EntityLockRegistry, invoice_key, order_key, shipment_key

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


class TestLockKeys:
    """Keys are namespaced by entity kind"""

    async def test_keys_do_not_collide(self):
        assert len({order_key("x"), shipment_key("x"), invoice_key("x")}) == 3


class TestEntityLockRegistry:
    """Serialization per key, independence across keys"""

    async def test_same_key_serializes(self):
        locks = EntityLockRegistry()
        trace = []

        async def worker(name):
            async with locks.hold(order_key("o1")):
                trace.append(f"{name}-in")
                await asyncio.sleep(0.01)
                trace.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert trace in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])

    async def test_different_keys_do_not_block(self):
        locks = EntityLockRegistry()
        entered = asyncio.Event()

        async def holder():
            async with locks.hold(order_key("o1")):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def other():
            async with locks.hold(order_key("o2")):
                entered.set()

        await asyncio.gather(holder(), other())

        assert entered.is_set()

    async def test_reentrant_within_task(self):
        locks = EntityLockRegistry()

        async with locks.hold(order_key("o1")):
            async with locks.hold(order_key("o1")):
                assert locks.is_locked(order_key("o1"))
            assert locks.is_locked(order_key("o1"))

        assert not locks.is_locked(order_key("o1"))

    async def test_released_after_exception(self):
        locks = EntityLockRegistry()

        with pytest.raises(RuntimeError):
            async with locks.hold(shipment_key("s1")):
                raise RuntimeError("boom")

        assert not locks.is_locked(shipment_key("s1"))

    async def test_other_task_waits_for_holder(self):
        locks = EntityLockRegistry()
        key = invoice_key("i1")

        async with locks.hold(key):
            waiter = asyncio.ensure_future(self._enter(locks, key))
            await asyncio.sleep(0.01)
            assert not waiter.done()

        await asyncio.wait_for(waiter, timeout=1)

    @staticmethod
    async def _enter(locks, key):
        async with locks.hold(key):
            return True
