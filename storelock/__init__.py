"""
storelock - named locks for asynchronous key-value stores that offer only
get, set and delete.
"""

from .env import Env, load_env
from .errors import StoreError, StoreLockError
from .leases import LeaseRecord, LockKeys
from .locking import LockManager, PassOutcome
from .stores import FileStore, KeyValueStore, MemoryStore

__version__ = "0.1.0"

__all__ = [
    "Env",
    "FileStore",
    "KeyValueStore",
    "LeaseRecord",
    "LockKeys",
    "LockManager",
    "MemoryStore",
    "PassOutcome",
    "StoreError",
    "StoreLockError",
    "load_env",
]
