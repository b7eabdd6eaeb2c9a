"""
Lease records written to the shared store.

A lock name owns two store keys. Each key independently holds a LeaseRecord
or nothing. A record only blocks an observer while it belongs to someone else
and its expiry is still in the future, so abandoned records age out on their
own and need no cleanup.

Stored shape:

    {"id": "<owner token>", "time": <expiry, epoch milliseconds>}
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Any

import msgspec


X_KEY_SUFFIX = "__MUTEX_x"
Y_KEY_SUFFIX = "__MUTEX_y"


def current_time_ms() -> int:
    """Wall clock in epoch milliseconds, comparable across processes."""
    return time.time_ns() // 1_000_000


def generate_owner_token() -> str:
    """128-bit random owner token, one per acquisition attempt."""
    return uuid.uuid4().hex


class LeaseRecord(msgspec.Struct, frozen=True, kw_only=True):
    owner_id: str = msgspec.field(name="id")
    expires_at: int = msgspec.field(name="time")

    def blocks(self, owner_id: str, now: int) -> bool:
        """True if this record is live from the point of view of ``owner_id``."""
        return self.owner_id != owner_id and not self.is_expired(now)

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now

    def to_stored(self) -> dict[str, Any]:
        return msgspec.to_builtins(self)

    @classmethod
    def from_stored(cls, value: Any) -> LeaseRecord | None:
        """
        Decode a stored value. Anything that is not a well formed record
        reads as absent, which the protocol treats as free.
        """
        if value is None:
            return None

        try:
            return msgspec.convert(value, type=cls)

        except msgspec.ValidationError:
            return None


def is_live(
    record: LeaseRecord | None,
    owner_id: str,
    now: int,
) -> bool:
    return record is not None and record.blocks(owner_id, now)


@dataclass(slots=True, frozen=True)
class LockKeys:
    name: str
    x: str
    y: str

    @classmethod
    def for_name(cls, name: str) -> LockKeys:
        return cls(
            name=name,
            x=f"{name}{X_KEY_SUFFIX}",
            y=f"{name}{Y_KEY_SUFFIX}",
        )
