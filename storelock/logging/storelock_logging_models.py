from .models import Entry, LogLevel


class LockTrace(Entry, kw_only=True):
    lock_name: str
    owner_id: str | None = None
    level: LogLevel = LogLevel.TRACE


class LockDebug(Entry, kw_only=True):
    lock_name: str
    owner_id: str | None = None
    level: LogLevel = LogLevel.DEBUG


class LockError(Entry, kw_only=True):
    lock_name: str
    owner_id: str | None = None
    error: str | None = None
    level: LogLevel = LogLevel.ERROR


class StoreDebug(Entry, kw_only=True):
    store: str
    key: str
    level: LogLevel = LogLevel.DEBUG
