"""Rate limit storage protocol (port).

Every storage backend implements this contract. The orchestrator
(RateLimiterService) holds exactly one implementation and shares it across
all concurrent calls.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides ADAPTERS (RedisStorage, InMemoryStorage,
  TokenBucketStorage)
- Application layer uses the protocol (doesn't know about specific adapters)

Keys passed to the protocol are the caller-visible keys. Each backend
prepends its own configured prefix before touching its store.

Usage:
    storage: RateLimitStorageProtocol = RedisStorage(redis_client=client)

    result = await storage.check_and_update(
        key="user:42",
        limit=10,
        window=timedelta(seconds=60),
        cost=1,
    )
"""

from datetime import timedelta
from typing import Protocol

from ratelimit_service.core.errors import DomainError
from ratelimit_service.core.result import Result
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult


class RateLimitStorageProtocol(Protocol):
    """Protocol for rate limit storage backends.

    Error Handling:
        Methods return Result types and never raise. Backend failures are
        Failure(RateLimitError); reset of an absent key is
        Failure(NotFoundError). Implementations do not log and do not retry.

    Concurrency:
        Methods may be called concurrently for the same key from many
        callers. Increments must never be lost.
    """

    async def check_and_update(
        self,
        key: str,
        limit: int,
        window: timedelta,
        cost: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Consume `cost` units for `key` and report the decision.

        Consumption is charged even when the result is not allowed: a request
        that overshoots the limit stays recorded until the window expires or
        the key is reset.

        Args:
            key: Caller-supplied rate limit key (unprefixed).
            limit: Maximum units per window.
            window: Window length, applied when this call creates the key.
            cost: Units this request consumes.

        Returns:
            Success(RateLimitResult) with allowed = post-increment count <= limit,
            or Failure(RateLimitError) on backend failure.
        """
        ...

    async def get_status(
        self,
        key: str,
        limit: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Read the current state for `key` without mutating it.

        Args:
            key: Caller-supplied rate limit key (unprefixed).
            limit: Limit to evaluate the stored count against.

        Returns:
            Success(RateLimitResult). A key with no state reports
            allowed=True, remaining=limit, reset_at=now.
        """
        ...

    async def reset(self, key: str) -> Result[None, DomainError]:
        """Delete all state for `key`.

        Args:
            key: Caller-supplied rate limit key (unprefixed).

        Returns:
            Success(None) when state was deleted, Failure(NotFoundError) with
            ErrorCode.KEY_NOT_FOUND when nothing existed.
        """
        ...

    async def close(self) -> Result[None, DomainError]:
        """Release backend resources (connections, pools).

        Calling close more than once must not corrupt stored state.
        """
        ...
