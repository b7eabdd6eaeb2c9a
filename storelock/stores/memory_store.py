import asyncio
import copy
from typing import Any


class MemoryStore:
    """
    In-process KeyValueStore.

    ``latency`` (seconds) is slept before every operation so that callers
    interleave at each store call the way they would against a remote store.
    Values are copied in and out so nobody shares mutable state with the store.
    """

    def __init__(
        self,
        latency: float = 0.0,
        init_store: dict[str, Any] | None = None,
    ) -> None:
        self._latency = latency
        self._store: dict[str, Any] = copy.deepcopy(init_store) if init_store else {}

    @property
    def latency(self):
        return self._latency

    async def _wait(self):
        if self._latency > 0:
            await asyncio.sleep(self._latency)

        else:
            await asyncio.sleep(0)

    async def get(self, key: str) -> Any | None:
        await self._wait()
        return copy.deepcopy(self._store.get(key))

    async def set(self, key: str, value: Any) -> None:
        await self._wait()
        self._store[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        await self._wait()
        self._store.pop(key, None)

    def read(self, key: str, default: Any | None = None):
        return copy.deepcopy(self._store.get(key, default))

    def write(self, key: str, value: Any):
        self._store[key] = copy.deepcopy(value)

    def keys(self) -> list[str]:
        return list(self._store.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
