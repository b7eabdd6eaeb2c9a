import asyncio
from typing import Callable

from storelock.leases import LeaseRecord, LockKeys, current_time_ms
from storelock.logging import Logger
from storelock.logging.storelock_logging_models import LockError, LockTrace
from storelock.stores import KeyValueStore

from .models import LockTimes


class RenewalScheduler:
    """
    Keeps an acquired lease alive while the critical section runs.

    Every reacquisition interval the keyX record is rewritten with a fresh
    expiry. keyY is left alone; the keyX record is what other passes check
    first. After ``stop()`` returns no renewal write is in flight and none
    will start, so release can delete the keys without a renewal
    resurrecting them.
    """

    __slots__ = (
        "_store",
        "_keys",
        "_owner_id",
        "_times",
        "_clock",
        "_logger",
        "_logger_name",
        "_task",
        "_write_lock",
        "_stopped",
        "_renewals",
    )

    def __init__(
        self,
        store: KeyValueStore,
        keys: LockKeys,
        owner_id: str,
        times: LockTimes,
        clock: Callable[[], int] = current_time_ms,
        logger: Logger | None = None,
        logger_name: str = "storelock",
    ) -> None:
        self._store = store
        self._keys = keys
        self._owner_id = owner_id
        self._times = times
        self._clock = clock
        self._logger = logger or Logger()
        self._logger_name = logger_name
        self._task: asyncio.Task | None = None
        self._write_lock = asyncio.Lock()
        self._stopped = False
        self._renewals = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def renewals(self) -> int:
        """Number of completed renewal writes."""
        return self._renewals

    def start(self):
        if self._stopped or self.running:
            return

        self._task = asyncio.create_task(self._run())

    async def stop(self):
        self._stopped = True

        # An in-flight write completes before the task is cancelled.
        async with self._write_lock:
            if self._task is not None:
                self._task.cancel()

        if self._task is not None:
            try:
                await self._task

            except asyncio.CancelledError:
                pass

            self._task = None

    async def renew(self) -> bool:
        """
        Write one renewal. Returns False without touching the store once
        the scheduler has been stopped.
        """
        async with self._write_lock:
            if self._stopped:
                return False

            record = LeaseRecord(
                owner_id=self._owner_id,
                expires_at=self._clock() + self._times.timeout_time,
            )

            await self._store.set(self._keys.x, record.to_stored())
            self._renewals += 1

        return True

    async def _run(self):
        while not self._stopped:
            await asyncio.sleep(self._times.reacquisition_seconds)

            try:
                renewed = await self.renew()

            except Exception as err:
                await self._logger.log(
                    LockError(
                        message=f"Failed to renew lease for {self._keys.name}",
                        lock_name=self._keys.name,
                        owner_id=self._owner_id,
                        error=repr(err),
                    ),
                    name=self._logger_name,
                )
                continue

            if renewed:
                await self._logger.log(
                    LockTrace(
                        message=f"Renewed lease for {self._keys.name}",
                        lock_name=self._keys.name,
                        owner_id=self._owner_id,
                    ),
                    name=self._logger_name,
                )
