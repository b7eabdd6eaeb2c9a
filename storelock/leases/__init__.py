"""
Lease records and key naming for store-backed locks.
"""

from .lease_record import (
    X_KEY_SUFFIX,
    Y_KEY_SUFFIX,
    LeaseRecord,
    LockKeys,
    current_time_ms,
    generate_owner_token,
    is_live,
)

__all__ = [
    "X_KEY_SUFFIX",
    "Y_KEY_SUFFIX",
    "LeaseRecord",
    "LockKeys",
    "current_time_ms",
    "generate_owner_token",
    "is_live",
]
