"""
Thread-safe token bucket shared by every request a client makes.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import threading
import time
from typing import Callable

from bgpstuff.exceptions import RequestCancelledError

logger = logging.getLogger(__name__)


class TokenBucket:
    """
    Token bucket limiter.

    Holds up to ``burst`` tokens and refills at ``rate`` tokens per second.
    ``acquire()`` takes a reservation under the lock and then sleeps outside
    it, so waiting callers are served in arrival order and the overall
    throughput never exceeds ``rate`` no matter how many threads share the
    bucket.

    Usage:
        bucket = TokenBucket.per_minute(30)
        bucket.acquire()
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    @classmethod
    def per_minute(cls, requests_per_minute: int) -> "TokenBucket":
        """Bucket allowing requests_per_minute calls per minute, bursting to the same amount."""
        return cls(rate=requests_per_minute / 60.0, burst=requests_per_minute)

    @property
    def tokens(self) -> float:
        """Tokens currently available. Negative while callers are queued."""
        with self._lock:
            self._refill(self._clock())
            return self._tokens

    def _refill(self, now: float) -> None:
        elapsed = now - self._last
        if elapsed > 0:
            self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
            self._last = now

    def _reserve(self) -> float:
        """Take one token, returning how long the caller must wait for it."""
        with self._lock:
            self._refill(self._clock())
            self._tokens -= 1
            if self._tokens >= 0:
                return 0.0
            return -self._tokens / self.rate

    def _release(self) -> None:
        with self._lock:
            self._refill(self._clock())
            self._tokens = min(float(self.burst), self._tokens + 1)

    def acquire(self, cancel: threading.Event | None = None) -> float:
        """
        Block until a token is available.

        Args:
            cancel: Optional event; setting it abandons the wait

        Returns:
            Seconds spent waiting

        Raises:
            RequestCancelledError: if cancel was set before a token was granted
        """
        if cancel is not None and cancel.is_set():
            raise RequestCancelledError("cancelled before acquiring a rate-limit token")

        delay = self._reserve()
        if delay <= 0:
            return 0.0

        logger.debug(f"Rate limited, waiting {delay:.2f}s for a token")
        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            self._release()
            raise RequestCancelledError("cancelled while waiting for a rate-limit token")
        return delay
