"""
Test: Lease renewal while the critical section runs

1. keyX is rewritten with a fresh expiry every reacquisition interval
2. keyY is never touched by renewal
3. No renewal write happens after stop()
4. stop() waits for an in-flight renewal write
5. A failing renewal write is logged and the next tick tries again

Run with: pytest tests/unit/locking/test_renewal.py
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from storelock.leases import LockKeys, current_time_ms
from storelock.locking import LockTimes, RenewalScheduler
from storelock.logging import Logger
from storelock.logging.storelock_logging_models import LockError
from tests.unit.stores.mocks import FailingStore, RecordingStore


KEYS = LockKeys.for_name("r")


def make_scheduler(store, logger=None, reacquisition_time=20, timeout_time=200):
    return RenewalScheduler(
        store,
        KEYS,
        "owner-a",
        LockTimes(
            reacquisition_time=reacquisition_time,
            timeout_time=timeout_time,
        ),
        logger=logger or AsyncMock(spec=Logger),
    )


@pytest.mark.asyncio
async def test_renews_x_periodically():
    """Test that keyX gets a fresh expiry on every tick."""
    store = RecordingStore()
    scheduler = make_scheduler(store)

    started = current_time_ms()
    scheduler.start()
    await asyncio.sleep(0.15)
    await scheduler.stop()

    assert scheduler.renewals >= 3
    record = store.read(KEYS.x)
    assert record["id"] == "owner-a"
    assert record["time"] >= started + 200 + 20
    assert ("set", KEYS.y) not in store.operations
    assert KEYS.y not in store


@pytest.mark.asyncio
async def test_no_writes_after_stop():
    store = RecordingStore()
    scheduler = make_scheduler(store)

    scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    writes = store.count("set", KEYS.x)
    await asyncio.sleep(0.08)

    assert store.count("set", KEYS.x) == writes
    assert not scheduler.running
    assert await scheduler.renew() is False


@pytest.mark.asyncio
async def test_stop_before_first_tick_never_writes():
    store = RecordingStore()
    scheduler = make_scheduler(store, reacquisition_time=50)

    scheduler.start()
    await scheduler.stop()
    await asyncio.sleep(0.08)

    assert store.operations == []


@pytest.mark.asyncio
async def test_stop_waits_for_in_flight_write():
    """Test that stop() returns only after a started write has landed."""
    store = RecordingStore(latency=0.05)
    scheduler = make_scheduler(store, reacquisition_time=10)

    scheduler.start()
    # First tick at 10ms, its write completes around 60ms
    await asyncio.sleep(0.03)
    assert store.count("set", KEYS.x) == 1
    assert KEYS.x not in store

    await scheduler.stop()

    assert KEYS.x in store
    assert scheduler.renewals == 1

    await asyncio.sleep(0.1)
    assert store.count("set", KEYS.x) == 1


@pytest.mark.asyncio
async def test_failed_renewal_is_logged_and_retried():
    """Test that a renewal error is logged and does not stop renewal."""
    store = FailingStore({("set", KEYS.x)}, failures=1)
    logger = AsyncMock(spec=Logger)
    scheduler = make_scheduler(store, logger=logger)

    scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    errors = [
        call.args[0]
        for call in logger.log.await_args_list
        if isinstance(call.args[0], LockError)
    ]
    assert len(errors) == 1
    assert errors[0].lock_name == "r"
    assert scheduler.renewals >= 1
    assert store.read(KEYS.x)["id"] == "owner-a"


@pytest.mark.asyncio
async def test_start_is_idempotent():
    store = RecordingStore()
    scheduler = make_scheduler(store)

    scheduler.start()
    first_task = scheduler._task
    scheduler.start()

    assert scheduler._task is first_task
    await scheduler.stop()
