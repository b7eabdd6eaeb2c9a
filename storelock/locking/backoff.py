"""
Backoff between acquisition passes.

A busy lock is retried after exactly reacquisition_time. A lost race is
retried after a uniformly random delay in [0, reacquisition_time). Repeated
collisions between contenders (livelock) become unlikely, not impossible.
"""

import asyncio
import random

from .models import LockTimes, PassOutcome


class BackoffPolicy:

    def __init__(
        self,
        times: LockTimes,
        rng: random.Random | None = None,
    ) -> None:
        self._times = times
        self._rng = rng or random.Random()

    def calculate_delay(self, outcome: PassOutcome) -> float:
        """
        Delay in seconds before the next pass after ``outcome``.
        """
        interval = self._times.reacquisition_seconds

        if outcome == PassOutcome.BUSY:
            return interval

        elif outcome == PassOutcome.LOST_RACE:
            # random() is in [0, 1), keeping the upper bound exclusive
            return self._rng.random() * interval

        return 0.0

    async def wait(self, outcome: PassOutcome) -> float:
        delay = self.calculate_delay(outcome)
        if delay > 0:
            await asyncio.sleep(delay)

        return delay
