"""
Global request throttle with a fixed minimum interval.

One instance is shared by everything that talks to the remote service, so the
interval applies across the whole run rather than per component.
"""

from __future__ import annotations

import threading
import time
from typing import Callable


class Throttle:
    def __init__(self,
                 interval: float = 1.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            interval: minimum seconds between two consecutive slots
            clock: monotonic time source (injectable for tests)
            sleep: sleep function (injectable for tests)
        """
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self.last = None
        self.lock = threading.Lock()

    def wait_for_slot(self) -> float:
        """Block until at least `interval` seconds have passed since the previous slot.

        Returns the number of seconds slept.
        """
        with self.lock:
            now = self.clock()
            waited = 0.0
            if self.last is None:
                # First slot waits the full interval
                waited = self.interval
            else:
                waited = max(0.0, self.interval - (now - self.last))
            if waited > 0:
                self.sleep(waited)
            self.last = self.clock()
            return waited


class NoDelayThrottle:
    """Throttle that never sleeps. Counts slots so tests can assert on them."""

    def __init__(self):
        self.calls = 0

    def wait_for_slot(self) -> float:
        self.calls += 1
        return 0.0
