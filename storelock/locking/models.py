from dataclasses import dataclass
from enum import Enum


class PassOutcome(Enum):
    """Result of one acquisition pass."""
    ACQUIRED = "acquired"    # Both keys hold our record, keyX still ours
    BUSY = "busy"            # Another owner's live record at keyX or keyY
    LOST_RACE = "lost_race"  # keyX was overwritten after we claimed keyY


@dataclass(slots=True)
class LockTimes:
    """
    Timing shared by every component of one LockManager.

    Both values are milliseconds. Components read them on use, so a setter
    call on the manager applies to the next pass, wait, or renewal.
    """
    reacquisition_time: int = 100
    timeout_time: int = 1000

    @property
    def reacquisition_seconds(self) -> float:
        return self.reacquisition_time / 1000
