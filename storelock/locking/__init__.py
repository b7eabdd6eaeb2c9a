"""
Store-backed lock acquisition, renewal and release.
"""

from .acquisition import AcquisitionProtocol
from .backoff import BackoffPolicy
from .lock_manager import LockManager
from .models import LockTimes, PassOutcome
from .release import ReleaseProtocol
from .renewal import RenewalScheduler
from .sequencer import KeyedSequencer

__all__ = [
    "AcquisitionProtocol",
    "BackoffPolicy",
    "KeyedSequencer",
    "LockManager",
    "LockTimes",
    "PassOutcome",
    "ReleaseProtocol",
    "RenewalScheduler",
]
