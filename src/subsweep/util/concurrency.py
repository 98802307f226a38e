"""Concurrency primitives for controlled parallel execution.

We want speed but not chaos - a permit pool keeps DNS query throughput
bounded no matter how many worker threads are running.
"""

import threading
from contextlib import contextmanager
from typing import Optional


class RateLimiter:
    """Pool of pre-filled permits gating DNS resolutions.

    Holds rate_limit permits. A worker takes one before a resolution and
    hands it back as soon as that resolution finishes. This smooths the
    query rate rather than capping it per second: when lookups complete
    quickly, more than rate_limit of them can start within one wall-clock
    second. What it does guarantee is that no more than rate_limit are in
    flight at once.
    """

    # How often a cancellable acquire wakes up to check for cancellation
    poll_interval = 0.1

    def __init__(self, rate_limit: int):
        """Initialize with rate_limit permits available."""
        if rate_limit < 1:
            raise ValueError(f"rate_limit must be >= 1, got {rate_limit}")
        self.rate_limit = rate_limit
        self._permits = threading.BoundedSemaphore(rate_limit)
        self._count_lock = threading.Lock()
        self._in_flight = 0

    def acquire(self, cancel_event: Optional[threading.Event] = None) -> bool:
        """Block until a permit is free.

        Returns False only if cancel_event fires while waiting; the caller
        then holds no permit.
        """
        if cancel_event is None:
            self._permits.acquire()
        else:
            while not self._permits.acquire(timeout=self.poll_interval):
                if cancel_event.is_set():
                    return False
        with self._count_lock:
            self._in_flight += 1
        return True

    def release(self) -> None:
        """Return a permit to the pool."""
        with self._count_lock:
            self._in_flight -= 1
        self._permits.release()

    @property
    def in_flight(self) -> int:
        """Permits currently held."""
        with self._count_lock:
            return self._in_flight

    @contextmanager
    def permit(self):
        """Hold a permit for the duration of the block.

        Usage:
            with limiter.permit():
                resolver.resolve(name)
        """
        self.acquire()
        try:
            yield
        finally:
            self.release()
