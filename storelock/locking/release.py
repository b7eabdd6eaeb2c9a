from storelock.leases import LockKeys
from storelock.stores import KeyValueStore

from .renewal import RenewalScheduler


class ReleaseProtocol:
    """
    Tears a held lock down in the reverse order of acquisition.

    Renewal is stopped (and any in-flight renewal write awaited) first, then
    keyY is deleted, then keyX.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def release(
        self,
        keys: LockKeys,
        renewal: RenewalScheduler | None = None,
    ):
        if renewal is not None:
            await renewal.stop()

        await self._store.delete(keys.y)
        await self._store.delete(keys.x)
