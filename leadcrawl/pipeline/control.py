"""
Cancellation-and-pause token shared between a run and its caller.
"""

import threading
from typing import Optional

import leadcrawl.config as cfg


class RunControl:
    """
    Thread-safe stop / pause flags.

    The run checks the token at the top of every loop iteration; the
    caller flips it from any thread. Both waits (pause and rate-limit
    sleep) wake as soon as stop is requested.
    """

    def __init__(self, poll_interval: Optional[float] = None) -> None:
        self.poll_interval = cfg.PAUSE_POLL if poll_interval is None else poll_interval
        self._stop = threading.Event()
        self._running = threading.Event()
        self._running.set()

    # -- Caller side -------------------------------------------------------

    def stop(self) -> None:
        self._stop.set()
        self._running.set()

    def pause(self) -> None:
        if not self._stop.is_set():
            self._running.clear()

    def resume(self) -> None:
        self._running.set()

    # -- Run side ----------------------------------------------------------

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    @property
    def pause_requested(self) -> bool:
        return not self._running.is_set()

    def wait_while_paused(self) -> bool:
        """Block while paused. Returns False if the run should stop."""
        while not self._running.wait(self.poll_interval):
            if self._stop.is_set():
                return False
        return not self._stop.is_set()

    def sleep(self, seconds: float) -> bool:
        """Sleep up to *seconds*. Returns False if stop cut it short."""
        return not self._stop.wait(seconds)
