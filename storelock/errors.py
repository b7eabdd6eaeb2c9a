"""
Exceptions raised by storelock.

Contention and lost races are not errors. They surface as pass outcomes
and drive backoff, so nothing here is raised for them.
"""


class StoreLockError(Exception):
    """Base class for storelock failures."""
    pass


class StoreError(StoreLockError):
    """
    Raised by the bundled store backends when the underlying medium fails
    (for example an unwritable directory for the FileStore). The original
    OSError is chained as the cause.
    """
    pass
