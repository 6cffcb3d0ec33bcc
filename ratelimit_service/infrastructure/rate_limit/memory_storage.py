"""In-process fixed-window storage.

Same algorithm and contract as RedisStorage, kept in a dict for single-process
deployments and for tests. Windows expire lazily: an entry past its expiry is
treated as absent and dropped on the next access to that key. Keys that are
never touched again are dropped by a sweep: once the map reaches
`sweep_threshold` entries, the next check_and_update removes every expired
window and the threshold grows to twice the surviving size, so the sweep
stays amortized O(1) per call.

State is guarded by one lock. Each operation is pure in-memory arithmetic, so
increment and expiry always happen together.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError, NotFoundError
from ratelimit_service.core.result import Failure, Result, Success
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _Window:
    count: int
    expires_at: datetime


class InMemoryStorage:
    """Process-local fixed-window counter.

    Args:
        key_prefix: Prepended to every caller-supplied key.
        clock: UTC clock, injectable for tests.
        sweep_threshold: Map size that triggers removal of expired windows.
    """

    def __init__(
        self,
        *,
        key_prefix: str = "ratelimit:",
        clock: Callable[[], datetime] = _utc_now,
        sweep_threshold: int = 1_000,
    ) -> None:
        self._key_prefix = key_prefix
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._sweep_threshold = sweep_threshold
        self._next_sweep_at = sweep_threshold

    async def check_and_update(
        self,
        key: str,
        limit: int,
        window: timedelta,
        cost: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Increment the window counter by `cost`, opening a window if needed."""
        storage_key = self._format_key(key)
        with self._lock:
            now = self._clock()
            if len(self._windows) >= self._next_sweep_at:
                self._sweep_expired(now)
            entry = self._live_entry(storage_key, now)
            if entry is None:
                entry = _Window(count=0, expires_at=now + window)
                self._windows[storage_key] = entry
            entry.count += cost
            count, expires_at = entry.count, entry.expires_at

        return Success(
            value=RateLimitResult.evaluate(
                consumed=count, limit=limit, reset_at=expires_at
            )
        )

    async def get_status(
        self,
        key: str,
        limit: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Read the window counter without writing."""
        storage_key = self._format_key(key)
        with self._lock:
            now = self._clock()
            entry = self._live_entry(storage_key, now)
            if entry is None:
                return Success(
                    value=RateLimitResult(
                        allowed=True, remaining=limit, reset_at=now, limit=limit
                    )
                )
            count, expires_at = entry.count, entry.expires_at

        return Success(
            value=RateLimitResult.evaluate(
                consumed=count, limit=limit, reset_at=expires_at
            )
        )

    async def reset(self, key: str) -> Result[None, DomainError]:
        """Drop the window for `key`."""
        storage_key = self._format_key(key)
        with self._lock:
            entry = self._live_entry(storage_key, self._clock())
            if entry is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.KEY_NOT_FOUND,
                        message=f"No rate limit state for key '{key}'",
                        resource_type="rate_limit_key",
                        resource_id=key,
                    )
                )
            del self._windows[storage_key]
        return Success(value=None)

    async def close(self) -> Result[None, DomainError]:
        """Discard all windows."""
        with self._lock:
            self._windows.clear()
            self._next_sweep_at = self._sweep_threshold
        return Success(value=None)

    def _format_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def _live_entry(self, storage_key: str, now: datetime) -> _Window | None:
        """Return the unexpired window for a key. Caller must hold the lock."""
        entry = self._windows.get(storage_key)
        if entry is not None and entry.expires_at <= now:
            del self._windows[storage_key]
            return None
        return entry

    def _sweep_expired(self, now: datetime) -> None:
        """Drop every expired window. Caller must hold the lock."""
        expired = [
            storage_key
            for storage_key, entry in self._windows.items()
            if entry.expires_at <= now
        ]
        for storage_key in expired:
            del self._windows[storage_key]
        self._next_sweep_at = max(self._sweep_threshold, 2 * len(self._windows))
