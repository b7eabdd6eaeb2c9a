"""
Per-name ordering of acquisition passes.

One instance must never run two passes for the same lock name at once: the
passes would interleave their read-then-write sequences and the instance
would race itself. Each lock name gets its own FIFO queue drained by a single
worker task. Different names never wait on each other. A queue and its worker
are created on first use and dropped as soon as the queue runs dry.

Every pass resolves the future its caller awaits, with a result or with the
exception the pass raised. Failures are also logged, and the worker moves on
to the next queued pass.

A caller that stops waiting does not stop a pass already running. When such
a pass finishes, its result is handed to the ``on_abandoned`` callback given
at submission, before the next pass for that name starts.
"""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable, NamedTuple

from storelock.logging import Logger
from storelock.logging.storelock_logging_models import LockError


class QueuedPass(NamedTuple):
    operation: Callable[[], Awaitable[Any]]
    future: asyncio.Future
    owner_id: str | None
    on_abandoned: Callable[[Any], Awaitable[None]] | None


class KeyedSequencer:

    __slots__ = (
        "_queues",
        "_workers",
        "_logger",
        "_logger_name",
    )

    def __init__(
        self,
        logger: Logger | None = None,
        logger_name: str = "storelock",
    ) -> None:
        self._queues: dict[str, deque[QueuedPass]] = {}
        self._workers: dict[str, asyncio.Task] = {}
        self._logger = logger or Logger()
        self._logger_name = logger_name

    @property
    def active_names(self) -> list[str]:
        return list(self._queues.keys())

    def pending(self, name: str) -> int:
        """Number of passes queued for ``name`` and not yet started."""
        queue = self._queues.get(name)
        return len(queue) if queue else 0

    async def submit(
        self,
        name: str,
        operation: Callable[[], Awaitable[Any]],
        owner_id: str | None = None,
        on_abandoned: Callable[[Any], Awaitable[None]] | None = None,
    ) -> Any:
        """
        Queue ``operation`` behind every pass already submitted for ``name``
        and wait for its result.
        """
        queued = QueuedPass(
            operation,
            asyncio.get_running_loop().create_future(),
            owner_id,
            on_abandoned,
        )

        queue = self._queues.get(name)
        if queue is None:
            queue = deque()
            self._queues[name] = queue
            queue.append(queued)
            self._workers[name] = asyncio.create_task(
                self._drain(name, queue)
            )

        else:
            queue.append(queued)

        try:
            return await queued.future

        except asyncio.CancelledError:
            future = queued.future
            # Cancelled after the pass resolved but before this task resumed.
            if (
                on_abandoned is not None
                and future.done()
                and not future.cancelled()
                and future.exception() is None
            ):
                await self._abandon(name, queued, future.result())

            raise

    async def _drain(
        self,
        name: str,
        queue: deque[QueuedPass],
    ):
        try:
            while queue:
                queued = queue.popleft()

                # Caller stopped waiting before the pass started.
                if queued.future.done():
                    continue

                try:
                    result = await queued.operation()

                except asyncio.CancelledError:
                    if not queued.future.done():
                        queued.future.cancel()

                    raise

                except Exception as err:
                    await self._log_failure(
                        name,
                        queued.owner_id,
                        f"Acquisition pass for {name} failed",
                        err,
                    )

                    if not queued.future.done():
                        queued.future.set_exception(err)

                else:
                    if not queued.future.done():
                        queued.future.set_result(result)

                    elif queued.on_abandoned is not None:
                        await self._abandon(name, queued, result)

        finally:
            while queue:
                queued = queue.popleft()
                if not queued.future.done():
                    queued.future.cancel()

            if self._queues.get(name) is queue:
                del self._queues[name]
                self._workers.pop(name, None)

    async def _abandon(
        self,
        name: str,
        queued: QueuedPass,
        result: Any,
    ):
        try:
            await queued.on_abandoned(result)

        except Exception as err:
            await self._log_failure(
                name,
                queued.owner_id,
                f"Cleanup of abandoned pass for {name} failed",
                err,
            )

    async def _log_failure(
        self,
        name: str,
        owner_id: str | None,
        message: str,
        err: Exception,
    ):
        await self._logger.log(
            LockError(
                message=message,
                lock_name=name,
                owner_id=owner_id,
                error=repr(err),
            ),
            name=self._logger_name,
        )

    async def close(self):
        workers = list(self._workers.values())
        for worker in workers:
            worker.cancel()

        await asyncio.gather(*workers, return_exceptions=True)
