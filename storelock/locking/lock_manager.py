"""
Named locks on top of a plain asynchronous key-value store.

The store only needs get, set and delete. There is no compare-and-swap and
nothing is atomic across keys, so exclusion is best-effort: a two-key pass
picks a winner among concurrent claimants, leases expire on their own when a
holder disappears, and randomized backoff after a lost race makes livelock
unlikely without ruling it out.

Usage:
    manager = LockManager(MemoryStore())

    # Block until the lock is held, run the critical section, release.
    result = await manager.acquire("reports", build_report)

    # One pass only. False means build_report never ran.
    ran = await manager.try_acquire("reports", build_report)
"""

import functools
import os
from typing import Awaitable, Callable, TypeVar

from storelock.env import Env, load_env
from storelock.leases import LockKeys, current_time_ms, generate_owner_token
from storelock.logging import Logger, LoggingConfig
from storelock.logging.storelock_logging_models import (
    LockDebug,
    LockError,
    LockTrace,
)
from storelock.stores import KeyValueStore

from .acquisition import AcquisitionProtocol
from .backoff import BackoffPolicy
from .models import LockTimes, PassOutcome
from .release import ReleaseProtocol
from .renewal import RenewalScheduler
from .sequencer import KeyedSequencer

T = TypeVar("T")

CriticalSection = Callable[[], Awaitable[T]]


class LockManager:
    """
    Coordinates acquisition, renewal and release of named locks for one
    instance.

    Attributes:
        store: The shared key-value store
        reacquisition_time: Renewal and busy-retry interval in milliseconds
        timeout_time: Lease lifetime in milliseconds
    """

    def __init__(
        self,
        store: KeyValueStore,
        env: Env | None = None,
        clock: Callable[[], int] = current_time_ms,
        logger: Logger | None = None,
        backoff: BackoffPolicy | None = None,
    ) -> None:
        if env is None:
            env = load_env(Env)

        self._env = env
        self._store = store
        self._clock = clock
        self._times = LockTimes()

        self.set_reacquisition_time(env.STORELOCK_REACQUISITION_TIME)
        self.set_timeout_time(env.STORELOCK_TIMEOUT_TIME)

        # Model defaults must not reset logging the application configured.
        explicit = env.model_fields_set
        LoggingConfig().update(
            log_level=(
                env.STORELOCK_LOG_LEVEL
                if "STORELOCK_LOG_LEVEL" in explicit
                else None
            ),
            log_output=(
                env.STORELOCK_LOG_OUTPUT
                if "STORELOCK_LOG_OUTPUT" in explicit
                else None
            ),
        )

        self._logger_name = "storelock"
        self._logger = logger or Logger()

        if env.STORELOCK_LOGS_DIRECTORY:
            self._logger.configure(
                name=self._logger_name,
                path=os.path.join(
                    env.STORELOCK_LOGS_DIRECTORY,
                    "storelock.json",
                ),
            )

        self._backoff = backoff or BackoffPolicy(self._times)
        self._acquisition = AcquisitionProtocol(
            store,
            self._times,
            clock=clock,
        )
        self._release = ReleaseProtocol(store)
        self._sequencer = KeyedSequencer(
            logger=self._logger,
            logger_name=self._logger_name,
        )

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def reacquisition_time(self) -> int:
        return self._times.reacquisition_time

    @property
    def timeout_time(self) -> int:
        return self._times.timeout_time

    def set_times(self, reacquisition_time: int):
        """
        Set the reacquisition time to ``reacquisition_time`` milliseconds
        and the timeout to ten times that.
        """
        self.set_reacquisition_time(reacquisition_time)
        self.set_timeout_time(10 * reacquisition_time)

    def set_reacquisition_time(self, reacquisition_time: int):
        if reacquisition_time <= 0:
            raise ValueError(
                f"Err. - reacquisition time must be positive, got {reacquisition_time}"
            )

        self._times.reacquisition_time = reacquisition_time

    def set_timeout_time(self, timeout_time: int):
        if timeout_time <= 0:
            raise ValueError(
                f"Err. - timeout time must be positive, got {timeout_time}"
            )

        self._times.timeout_time = timeout_time

    async def acquire(
        self,
        name: str,
        critical_section: CriticalSection[T],
    ) -> T:
        """
        Block until ``name`` is locked, run ``critical_section`` and release.

        Returns the critical section's result. If it raises, the lock is
        released first and the exception propagates unchanged. There is no
        deadline; wrap the call in ``asyncio.wait_for`` to bound it.
        """
        _, result = await self._run(name, True, critical_section)
        return result

    async def try_acquire(
        self,
        name: str,
        critical_section: CriticalSection[T],
    ) -> bool:
        """
        Make one acquisition pass. Returns True if the lock was taken and
        ``critical_section`` ran. A failed pass waits out one backoff interval
        before returning False.
        """
        return await self.attempt_lock(name, False, critical_section)

    async def attempt_lock(
        self,
        name: str,
        blocking: bool,
        critical_section: CriticalSection[T],
    ) -> bool:
        acquired, _ = await self._run(name, blocking, critical_section)
        return acquired

    async def _run(
        self,
        name: str,
        blocking: bool,
        critical_section: CriticalSection[T],
    ) -> tuple[bool, T | None]:
        keys = LockKeys.for_name(name)
        owner_id = generate_owner_token()

        acquired = await self._acquire_keys(keys, owner_id, blocking)
        if not acquired:
            return False, None

        renewal = RenewalScheduler(
            self._store,
            keys,
            owner_id,
            self._times,
            clock=self._clock,
            logger=self._logger,
            logger_name=self._logger_name,
        )
        renewal.start()

        try:
            await self._logger.log(
                LockDebug(
                    message=f"Acquired lock {name}",
                    lock_name=name,
                    owner_id=owner_id,
                ),
                name=self._logger_name,
            )

            result = await critical_section()

        except BaseException:
            try:
                await self._release.release(keys, renewal)

            except Exception as release_error:
                await self._logger.log(
                    LockError(
                        message=f"Failed to release lock {name} after critical section error",
                        lock_name=name,
                        owner_id=owner_id,
                        error=repr(release_error),
                    ),
                    name=self._logger_name,
                )

            raise

        await self._release.release(keys, renewal)

        await self._logger.log(
            LockDebug(
                message=f"Released lock {name}",
                lock_name=name,
                owner_id=owner_id,
            ),
            name=self._logger_name,
        )

        return True, result

    async def _acquire_keys(
        self,
        keys: LockKeys,
        owner_id: str,
        blocking: bool,
    ) -> bool:
        while True:
            outcome = await self._sequencer.submit(
                keys.name,
                functools.partial(
                    self._acquisition.attempt,
                    keys,
                    owner_id,
                ),
                owner_id=owner_id,
                on_abandoned=functools.partial(
                    self._release_abandoned,
                    keys,
                    owner_id,
                ),
            )

            if outcome == PassOutcome.ACQUIRED:
                return True

            await self._logger.log(
                LockTrace(
                    message=f"Pass for {keys.name} ended {outcome.value}",
                    lock_name=keys.name,
                    owner_id=owner_id,
                ),
                name=self._logger_name,
            )

            await self._backoff.wait(outcome)

            if not blocking:
                return False

    async def _release_abandoned(
        self,
        keys: LockKeys,
        owner_id: str,
        outcome: PassOutcome,
    ):
        """
        Run by the sequencer when a pass finished after its caller was
        cancelled. An acquired lock nobody will use is released at once.
        """
        if outcome != PassOutcome.ACQUIRED:
            return

        await self._release.release(keys)

        await self._logger.log(
            LockDebug(
                message=f"Released lock {keys.name} acquired after its caller gave up",
                lock_name=keys.name,
                owner_id=owner_id,
            ),
            name=self._logger_name,
        )

    async def close(self):
        await self._sequencer.close()
        await self._logger.close()
