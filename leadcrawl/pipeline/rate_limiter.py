"""
Fixed-interval rate limiter with periodic backoff.

Every ``acquire`` reserves the next free slot; slots are ``interval``
seconds apart, and every ``backoff_every``-th slot is followed by the
longer ``backoff_interval`` instead. Thread-safe, so one limiter can bound
the aggregate request rate of a worker pool.
"""

import threading
import time
from typing import Callable, Optional

from loguru import logger

from leadcrawl.pipeline.control import RunControl


class RateLimiter:
    def __init__(
        self,
        interval: float,
        backoff_every: int = 0,
        backoff_interval: float = 0.0,
        name: str = "limiter",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = max(0.0, interval)
        self.backoff_every = backoff_every
        self.backoff_interval = max(0.0, backoff_interval)
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._next_slot = 0.0
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def _gap_after(self, count: int) -> float:
        if self.backoff_every and count % self.backoff_every == 0:
            return max(self.interval, self.backoff_interval)
        return self.interval

    def acquire(self, control: Optional[RunControl] = None) -> bool:
        """
        Wait for the next slot.

        Returns False, without waiting further, if *control* is stopped
        before or during the wait.
        """
        if control is not None and control.stop_requested:
            return False

        with self._lock:
            now = self._clock()
            wait = max(0.0, self._next_slot - now)
            self._count += 1
            gap = self._gap_after(self._count)
            self._next_slot = max(now, self._next_slot) + gap
            if gap > self.interval:
                logger.debug("{}: backing off {:.1f}s after slot {}", self.name, gap, self._count)

        if wait <= 0:
            return True
        if control is not None:
            return control.sleep(wait)
        time.sleep(wait)
        return True
