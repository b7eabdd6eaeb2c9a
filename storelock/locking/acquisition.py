"""
Two-key acquisition pass.

No single store write can claim a lock atomically, so every lock name uses
two keys and the order in which keyX was last written picks the winner:

1. Read keyX. Someone else's live record there means BUSY.
2. Write our record to keyX (tentative claim).
3. Read keyY. Someone else's live record there means BUSY.
4. Write our record to keyY.
5. Re-read keyX. If it is gone or belongs to someone else, a concurrent
   attempt overwrote it while we were claiming keyY: LOST_RACE.
6. Otherwise both keys carry our record: ACQUIRED.

A tentative keyX write left behind by a failed pass is harmless. Later
passes by the same owner ignore it, and other owners overwrite it.

Store errors are not caught here. A failed pass leaves whatever it already
wrote to expire by itself; deleting it again could remove a concurrent
claimant's newer record.
"""

from typing import Callable

from storelock.leases import LeaseRecord, LockKeys, current_time_ms, is_live
from storelock.stores import KeyValueStore

from .models import LockTimes, PassOutcome


class AcquisitionProtocol:

    def __init__(
        self,
        store: KeyValueStore,
        times: LockTimes,
        clock: Callable[[], int] = current_time_ms,
    ) -> None:
        self._store = store
        self._times = times
        self._clock = clock

    async def read_record(self, key: str) -> LeaseRecord | None:
        return LeaseRecord.from_stored(
            await self._store.get(key)
        )

    async def write_record(self, key: str, record: LeaseRecord):
        await self._store.set(key, record.to_stored())

    async def attempt(
        self,
        keys: LockKeys,
        owner_id: str,
    ) -> PassOutcome:
        record = LeaseRecord(
            owner_id=owner_id,
            expires_at=self._clock() + self._times.timeout_time,
        )

        current = await self.read_record(keys.x)
        if is_live(current, owner_id, self._clock()):
            return PassOutcome.BUSY

        await self.write_record(keys.x, record)

        current = await self.read_record(keys.y)
        if is_live(current, owner_id, self._clock()):
            return PassOutcome.BUSY

        await self.write_record(keys.y, record)

        # The keyX race decides the winner, not the keyY one.
        current = await self.read_record(keys.x)
        if current is None or current.owner_id != owner_id:
            return PassOutcome.LOST_RACE

        return PassOutcome.ACQUIRED
