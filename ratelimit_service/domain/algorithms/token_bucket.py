"""Thread-safe, in-process token bucket.

Token Bucket Algorithm:
    - Bucket starts full (capacity tokens)
    - Every `refill_period`, `refill_rate` tokens are added, up to capacity
    - Refill is computed lazily on each allow() call, not on a timer
    - Only whole periods are credited; the refill timestamp advances by
      exactly `periods * refill_period`, so partial-period progress carries
      over to the next call
    - A request costing more than the available tokens is denied and
      consumes nothing

One exclusive lock guards the whole refill-then-consume sequence of a single
bucket. The lock never covers I/O and is never shared between buckets.

Usage:
    bucket = TokenBucket(
        capacity=5,
        refill_rate=1,
        refill_period=timedelta(milliseconds=100),
    )
    allowed, tokens = bucket.allow(3)  # (True, 2)
"""

import threading
import time
from collections.abc import Callable
from datetime import timedelta

_NS_PER_MICROSECOND = 1_000


class TokenBucket:
    """Lazily refilled token bucket guarded by a single mutex.

    Timestamps are integer nanoseconds from `clock` (monotonic by default) so
    the period arithmetic is exact.

    Args:
        capacity: Maximum tokens the bucket can hold.
        refill_rate: Tokens added per refill period.
        refill_period: How often refill_rate tokens are added.
        clock: Nanosecond clock, injectable for tests.
        initial_tokens: Starting tokens, clamped to capacity. Full when None.

    Raises:
        ValueError: If capacity, refill_rate or refill_period is not positive,
            or initial_tokens is negative.
    """

    def __init__(
        self,
        *,
        capacity: int,
        refill_rate: int,
        refill_period: timedelta,
        clock: Callable[[], int] = time.monotonic_ns,
        initial_tokens: int | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        if refill_rate <= 0:
            raise ValueError("refill_rate must be greater than zero")
        period_ns = (refill_period // timedelta(microseconds=1)) * _NS_PER_MICROSECOND
        if period_ns <= 0:
            raise ValueError("refill_period must be at least one microsecond")
        if initial_tokens is not None and initial_tokens < 0:
            raise ValueError("initial_tokens must not be negative")

        self._capacity = capacity
        self._refill_rate = refill_rate
        self._period_ns = period_ns
        self._clock = clock
        self._tokens = (
            capacity if initial_tokens is None else min(capacity, initial_tokens)
        )
        self._last_refill_ns = clock()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        """Maximum tokens the bucket can hold."""
        return self._capacity

    @property
    def refill_rate(self) -> int:
        """Tokens added per refill period."""
        return self._refill_rate

    @property
    def refill_period(self) -> timedelta:
        """Interval between refills."""
        return timedelta(microseconds=self._period_ns // _NS_PER_MICROSECOND)

    @property
    def tokens(self) -> int:
        """Tokens held as of the last allow() call (no refill applied)."""
        with self._lock:
            return self._tokens

    def allow(self, cost: int = 1) -> tuple[bool, int]:
        """Refill, then try to consume `cost` tokens.

        Args:
            cost: Tokens this request needs.

        Returns:
            (True, tokens left) when consumed, (False, current tokens) when
            denied. A denied call leaves the token count unchanged.
        """
        with self._lock:
            self._refill(self._clock())
            if self._tokens - cost < 0:
                return False, self._tokens
            self._tokens -= cost
            return True, self._tokens

    def peek(self) -> tuple[int, timedelta]:
        """Report tokens available now and time until the next refill.

        Read-only: the pending refill is computed but not stored.

        Returns:
            (available tokens, time until the next refill adds tokens).
        """
        with self._lock:
            now = self._clock()
            periods = (now - self._last_refill_ns) // self._period_ns
            tokens = min(self._capacity, self._tokens + self._refill_rate * periods)
            next_refill_ns = self._last_refill_ns + (periods + 1) * self._period_ns
            return tokens, self._to_timedelta(next_refill_ns - now)

    def _refill(self, now: int) -> None:
        """Credit whole elapsed periods. Caller must hold the lock."""
        periods = (now - self._last_refill_ns) // self._period_ns
        if periods <= 0:
            return
        self._last_refill_ns += periods * self._period_ns
        self._tokens = min(self._capacity, self._tokens + self._refill_rate * periods)

    @staticmethod
    def _to_timedelta(ns: int) -> timedelta:
        return timedelta(microseconds=max(0, ns) // _NS_PER_MICROSECOND)
