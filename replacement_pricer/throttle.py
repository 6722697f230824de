from __future__ import annotations

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger("replacement_pricer.throttle")


class Throttle:
    """Enforce a minimum gap between outbound calls, across threads."""

    def __init__(
        self,
        min_interval_s: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until the next call may go out. Returns the seconds waited."""
        with self._lock:
            waited = 0.0
            now = self._clock()
            if self._last is not None:
                elapsed = now - self._last
                if elapsed < self.min_interval_s:
                    waited = self.min_interval_s - elapsed
                    logger.info("throttling outbound call for %.2fs", waited)
                    self._sleep(waited)
                    now = self._clock()
            self._last = now
            return waited
