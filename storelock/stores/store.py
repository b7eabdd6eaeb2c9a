from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """
    The only capability the lock protocol needs from a store.

    Each call is individually consistent (a read after a write to the same
    key observes that write). Nothing is atomic across keys, and there is no
    compare-and-swap. Values are JSON-compatible builtins.
    """

    async def get(self, key: str) -> Any | None:
        """Return the value stored at ``key``, or None if absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        ...

    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting an absent key is a no-op."""
        ...
