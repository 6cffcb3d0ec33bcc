"""Token bucket storage: a keyed registry of in-process TokenBucket instances.

Puts the local token-bucket algorithm behind RateLimitStorageProtocol so the
orchestrator can use it exactly like the fixed-window backends.

Mapping from contract arguments to bucket parameters:
    capacity      = limit
    refill_rate   = limit
    refill_period = window

i.e. a drained bucket regains its full limit over one window, but refills
in whole-window steps. limit and window come with every call: when they
differ from the bucket's current parameters the bucket is rebuilt with the
new ones, carrying over its available tokens (clamped to the new limit).

Unlike the fixed window, a denied request consumes nothing.

Eviction:
    A bucket that has refilled to capacity holds no information a fresh
    bucket would not, so once the registry reaches `sweep_threshold` entries
    the next get-or-create drops every full bucket. The threshold then grows
    to twice the surviving size, keeping the sweep amortized O(1) per call.

Locking:
    The registry lock covers get-or-create and sweeps. Each bucket's own lock
    covers its refill+consume, so independent keys never contend.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError, NotFoundError
from ratelimit_service.core.result import Failure, Result, Success
from ratelimit_service.domain.algorithms.token_bucket import TokenBucket
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TokenBucketStorage:
    """Per-key token buckets behind the storage contract.

    Args:
        key_prefix: Prepended to every caller-supplied key.
        clock: UTC clock used for reset_at, injectable for tests.
        bucket_clock: Nanosecond monotonic clock handed to each bucket.
        sweep_threshold: Registry size that triggers eviction of full buckets.
    """

    def __init__(
        self,
        *,
        key_prefix: str = "ratelimit:",
        clock: Callable[[], datetime] = _utc_now,
        bucket_clock: Callable[[], int] = time.monotonic_ns,
        sweep_threshold: int = 1_000,
    ) -> None:
        self._key_prefix = key_prefix
        self._clock = clock
        self._bucket_clock = bucket_clock
        self._buckets: dict[str, TokenBucket] = {}
        self._registry_lock = threading.Lock()
        self._sweep_threshold = sweep_threshold
        self._next_sweep_at = sweep_threshold

    async def check_and_update(
        self,
        key: str,
        limit: int,
        window: timedelta,
        cost: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Take `cost` tokens from the key's bucket if available."""
        bucket = self._get_or_create(self._format_key(key), limit, window)
        allowed, tokens = bucket.allow(cost)
        _, next_refill_in = bucket.peek()
        return Success(
            value=RateLimitResult(
                allowed=allowed,
                remaining=_clamp(tokens, limit),
                reset_at=self._clock() + next_refill_in,
                limit=limit,
            )
        )

    async def get_status(
        self,
        key: str,
        limit: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Report available tokens without consuming.

        allowed is True while at least one token is available. remaining is
        clamped to `limit` when the bucket was built with a larger one.
        """
        with self._registry_lock:
            bucket = self._buckets.get(self._format_key(key))
        now = self._clock()
        if bucket is None:
            return Success(
                value=RateLimitResult(
                    allowed=True, remaining=limit, reset_at=now, limit=limit
                )
            )

        tokens, next_refill_in = bucket.peek()
        return Success(
            value=RateLimitResult(
                allowed=tokens > 0,
                remaining=_clamp(tokens, limit),
                reset_at=now + next_refill_in,
                limit=limit,
            )
        )

    async def reset(self, key: str) -> Result[None, DomainError]:
        """Drop the bucket for `key`; the next request starts full."""
        with self._registry_lock:
            bucket = self._buckets.pop(self._format_key(key), None)
        if bucket is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.KEY_NOT_FOUND,
                    message=f"No rate limit state for key '{key}'",
                    resource_type="rate_limit_key",
                    resource_id=key,
                )
            )
        return Success(value=None)

    async def close(self) -> Result[None, DomainError]:
        """Discard all buckets."""
        with self._registry_lock:
            self._buckets.clear()
            self._next_sweep_at = self._sweep_threshold
        return Success(value=None)

    def _format_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _get_or_create(
        self, storage_key: str, limit: int, window: timedelta
    ) -> TokenBucket:
        with self._registry_lock:
            bucket = self._buckets.get(storage_key)
            if bucket is None:
                if len(self._buckets) >= self._next_sweep_at:
                    self._sweep_full_buckets()
                bucket = self._new_bucket(limit, window)
                self._buckets[storage_key] = bucket
            elif bucket.capacity != limit or bucket.refill_period != window:
                tokens, _ = bucket.peek()
                bucket = self._new_bucket(limit, window, initial_tokens=tokens)
                self._buckets[storage_key] = bucket
            return bucket

    def _new_bucket(
        self, limit: int, window: timedelta, initial_tokens: int | None = None
    ) -> TokenBucket:
        return TokenBucket(
            capacity=limit,
            refill_rate=limit,
            refill_period=window,
            clock=self._bucket_clock,
            initial_tokens=initial_tokens,
        )

    def _sweep_full_buckets(self) -> None:
        """Drop buckets that have refilled to capacity. Caller holds the lock."""
        full = [
            storage_key
            for storage_key, bucket in self._buckets.items()
            if bucket.peek()[0] >= bucket.capacity
        ]
        for storage_key in full:
            del self._buckets[storage_key]
        self._next_sweep_at = max(self._sweep_threshold, 2 * len(self._buckets))


def _clamp(tokens: int, limit: int) -> int:
    return max(0, min(limit, tokens))
