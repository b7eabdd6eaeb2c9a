from .file_store import FileStore
from .memory_store import MemoryStore
from .store import KeyValueStore

__all__ = [
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
]
