"""
Request sequencing for the external catalog

Jikan throttles clients that call it too quickly, so every request issued by
one run goes through a single RequestSequencer that keeps a minimum gap
between consecutive calls.
"""

import logging
import threading
import time
from typing import Callable

from .exceptions import RunCancelled

logger = logging.getLogger(__name__)

# Seconds between two catalog requests
MIN_REQUEST_INTERVAL = 0.3


class RequestSequencer:
    """Single-slot sequencer enforcing a minimum interval between calls"""

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        max_run_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            min_interval: Seconds to keep between two requests (never below
                MIN_REQUEST_INTERVAL)
            max_run_seconds: Optional wall-clock cap for the whole run,
                counted from the first request
            clock: Monotonic clock, replaceable in tests
        """
        if min_interval < MIN_REQUEST_INTERVAL:
            logger.warning(
                f"Request interval {min_interval}s is below the minimum, "
                f"using {MIN_REQUEST_INTERVAL}s"
            )
            min_interval = MIN_REQUEST_INTERVAL

        self.min_interval = min_interval
        self.max_run_seconds = max_run_seconds
        self._clock = clock
        self._cancelled = threading.Event()
        self._started: float | None = None
        self._last_request: float | None = None
        self.total_requests = 0
        self.total_wait = 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        """Stop the run at its next suspension point"""
        logger.debug("Run cancellation requested")
        self._cancelled.set()

    def acquire(self):
        """
        Block until the next request may be issued

        Raises:
            RunCancelled: if the run was cancelled or ran past its time cap
        """
        self._check_active()

        now = self._clock()
        if self._started is None:
            self._started = now

        if self._last_request is not None:
            remaining = self.min_interval - (now - self._last_request)
            if remaining > 0:
                self.total_wait += remaining
                # Event.wait returns True as soon as cancel() is called
                if self._cancelled.wait(remaining):
                    raise RunCancelled("Run cancelled while waiting for the catalog")

        self._check_active()
        self._last_request = self._clock()
        self.total_requests += 1

    def _check_active(self):
        if self._cancelled.is_set():
            raise RunCancelled("Run cancelled")

        if self.max_run_seconds is not None and self._started is not None:
            elapsed = self._clock() - self._started
            if elapsed > self.max_run_seconds:
                raise RunCancelled(
                    f"Run exceeded its {self.max_run_seconds}s time limit"
                )

    def stats(self) -> dict:
        return {
            "total_requests": self.total_requests,
            "total_wait_seconds": round(self.total_wait, 1),
        }
