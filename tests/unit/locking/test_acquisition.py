"""
Test: Two-key acquisition pass

1. A free name is acquired and both keys carry our record
2. Another owner's live record at keyX or keyY means BUSY
3. An attempt's own stale tentative records never block it
4. Expired and malformed records are free
5. keyX overwritten or removed after claiming keyY means LOST_RACE
6. Store errors propagate and leave the tentative keyX record to expire

Run with: pytest tests/unit/locking/test_acquisition.py
"""

import pytest

from storelock.leases import LockKeys
from storelock.locking import AcquisitionProtocol, LockTimes, PassOutcome
from storelock.stores import MemoryStore
from tests.unit.stores.mocks import (
    FailingStore,
    InterferingStore,
    RecordingStore,
    StoreUnavailableError,
)


KEYS = LockKeys.for_name("r")


def make_protocol(store, fake_clock, timeout_time: int = 1000):
    return AcquisitionProtocol(
        store,
        LockTimes(reacquisition_time=100, timeout_time=timeout_time),
        clock=fake_clock,
    )


@pytest.mark.asyncio
async def test_free_name_is_acquired(fake_clock):
    """Test that a pass on an unclaimed name succeeds."""
    store = MemoryStore()
    protocol = make_protocol(store, fake_clock)

    outcome = await protocol.attempt(KEYS, "owner-a")

    expected = {"id": "owner-a", "time": fake_clock.now + 1000}
    assert outcome == PassOutcome.ACQUIRED
    assert store.read(KEYS.x) == expected
    assert store.read(KEYS.y) == expected


@pytest.mark.asyncio
async def test_pass_order_of_operations(fake_clock):
    """Test the read X, write X, read Y, write Y, re-read X sequence."""
    store = RecordingStore()
    protocol = make_protocol(store, fake_clock)

    await protocol.attempt(KEYS, "owner-a")

    assert store.operations == [
        ("get", KEYS.x),
        ("set", KEYS.x),
        ("get", KEYS.y),
        ("set", KEYS.y),
        ("get", KEYS.x),
    ]


@pytest.mark.asyncio
async def test_busy_at_x(fake_clock):
    """Test that a live foreign record at keyX fails before any write."""
    store = RecordingStore()
    foreign = {"id": "owner-b", "time": fake_clock.now + 500}
    store.write(KEYS.x, foreign)
    protocol = make_protocol(store, fake_clock)

    outcome = await protocol.attempt(KEYS, "owner-a")

    assert outcome == PassOutcome.BUSY
    assert store.operations == [("get", KEYS.x)]
    assert store.read(KEYS.x) == foreign
    assert KEYS.y not in store


@pytest.mark.asyncio
async def test_busy_at_y_leaves_tentative_x(fake_clock):
    """Test that a live foreign record at keyY fails after the keyX claim."""
    store = MemoryStore()
    foreign = {"id": "owner-b", "time": fake_clock.now + 500}
    store.write(KEYS.y, foreign)
    protocol = make_protocol(store, fake_clock)

    outcome = await protocol.attempt(KEYS, "owner-a")

    assert outcome == PassOutcome.BUSY
    assert store.read(KEYS.x)["id"] == "owner-a"
    assert store.read(KEYS.y) == foreign


@pytest.mark.asyncio
async def test_own_stale_records_do_not_block(fake_clock):
    """Test that an attempt's leftover tentative writes never fail its pass."""
    store = MemoryStore()
    stale = {"id": "owner-a", "time": fake_clock.now + 900}
    store.write(KEYS.x, stale)
    store.write(KEYS.y, stale)
    protocol = make_protocol(store, fake_clock)

    outcome = await protocol.attempt(KEYS, "owner-a")

    assert outcome == PassOutcome.ACQUIRED
    assert store.read(KEYS.x)["time"] == fake_clock.now + 1000


@pytest.mark.asyncio
async def test_retry_after_busy_at_y_succeeds_once_free(fake_clock):
    """Test that the same owner retries past its own tentative keyX write."""
    store = MemoryStore()
    store.write(KEYS.y, {"id": "owner-b", "time": fake_clock.now + 500})
    protocol = make_protocol(store, fake_clock)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.BUSY

    fake_clock.advance(600)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.ACQUIRED


@pytest.mark.asyncio
async def test_expired_records_are_free(fake_clock):
    """Test that records whose expiry has passed do not block."""
    store = MemoryStore()
    stale = {"id": "stale", "time": fake_clock.now - 10000}
    store.write(KEYS.x, stale)
    store.write(KEYS.y, stale)
    protocol = make_protocol(store, fake_clock)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.ACQUIRED


@pytest.mark.asyncio
async def test_record_expiring_now_is_free(fake_clock):
    store = MemoryStore()
    store.write(KEYS.x, {"id": "owner-b", "time": fake_clock.now})
    protocol = make_protocol(store, fake_clock)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.ACQUIRED


@pytest.mark.asyncio
async def test_malformed_records_are_free(fake_clock):
    store = MemoryStore()
    store.write(KEYS.x, "not a lease")
    store.write(KEYS.y, {"owner": "someone"})
    protocol = make_protocol(store, fake_clock)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.ACQUIRED


@pytest.mark.asyncio
async def test_lost_race_when_x_overwritten(fake_clock):
    """Test that a concurrent keyX overwrite during the pass loses the race."""
    store = InterferingStore(
        trigger_key=KEYS.y,
        victim_key=KEYS.x,
        value={"id": "owner-b", "time": fake_clock.now + 1000},
    )
    protocol = make_protocol(store, fake_clock)

    outcome = await protocol.attempt(KEYS, "owner-a")

    assert outcome == PassOutcome.LOST_RACE
    assert store.read(KEYS.y)["id"] == "owner-a"


@pytest.mark.asyncio
async def test_lost_race_when_x_removed(fake_clock):
    """Test that keyX disappearing during the pass loses the race."""
    store = InterferingStore(
        trigger_key=KEYS.y,
        victim_key=KEYS.x,
        value=None,
    )
    protocol = make_protocol(store, fake_clock)

    assert await protocol.attempt(KEYS, "owner-a") == PassOutcome.LOST_RACE


@pytest.mark.asyncio
async def test_timeout_applies_to_written_records(fake_clock):
    store = MemoryStore()
    protocol = make_protocol(store, fake_clock, timeout_time=250)

    await protocol.attempt(KEYS, "owner-a")

    assert store.read(KEYS.x)["time"] == fake_clock.now + 250


@pytest.mark.asyncio
async def test_store_error_propagates_and_leaves_tentative_claim(fake_clock):
    """Test that a store failure mid-pass raises and nothing is cleaned up."""
    store = FailingStore({("get", KEYS.y)})
    protocol = make_protocol(store, fake_clock)

    with pytest.raises(StoreUnavailableError):
        await protocol.attempt(KEYS, "owner-a")

    assert store.read(KEYS.x)["id"] == "owner-a"
    assert ("delete", KEYS.x) not in store.operations
