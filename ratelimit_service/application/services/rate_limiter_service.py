"""Rate limiter orchestration service.

Validates caller input, then delegates verbatim to the configured storage
backend. The service owns no state and adds no side effects: whatever
Result the storage returns is handed back unchanged.

Validation (checked in this order, first failure wins):
    key     empty or whitespace-only       -> ErrorCode.INVALID_KEY
    limit   <= 0                           -> ErrorCode.INVALID_LIMIT
    window  <= 0 (consumption only)        -> ErrorCode.INVALID_WINDOW
    cost    <= 0 (consumption only)        -> ErrorCode.INVALID_COST

Validation failures never reach storage.

Usage:
    service = RateLimiterService(storage=storage)

    result = await service.check_rate_limit(
        key="user:42",
        limit=100,
        window=timedelta(minutes=1),
        cost=1,
    )
    match result:
        case Success(value=decision) if not decision.allowed:
            ...  # 429
        case Failure(error=err) if err.code.is_validation_error:
            ...  # 400
"""

from datetime import timedelta

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError, ValidationError
from ratelimit_service.core.result import Failure, Result
from ratelimit_service.domain.protocols.rate_limit_storage_protocol import (
    RateLimitStorageProtocol,
)
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult


class RateLimiterService:
    """Validating front door to a rate limit storage backend.

    Args:
        storage: Backend implementing RateLimitStorageProtocol, shared across
            all concurrent calls.
    """

    def __init__(self, *, storage: RateLimitStorageProtocol) -> None:
        self._storage = storage

    async def check_rate_limit(
        self,
        *,
        key: str,
        limit: int,
        window: timedelta,
        cost: int = 1,
    ) -> Result[RateLimitResult, DomainError]:
        """Validate and consume `cost` units for `key`.

        Args:
            key: Caller-supplied rate limit key.
            limit: Maximum units per window.
            window: Window length.
            cost: Units this request consumes.

        Returns:
            Storage Result unchanged, or Failure(ValidationError).
        """
        error = (
            _validate_key(key)
            or _validate_limit(limit)
            or _validate_window(window)
            or _validate_cost(cost)
        )
        if error is not None:
            return Failure(error=error)

        return await self._storage.check_and_update(key, limit, window, cost)

    async def get_status(
        self,
        *,
        key: str,
        limit: int,
    ) -> Result[RateLimitResult, DomainError]:
        """Validate and read the current state of `key` without consuming.

        Args:
            key: Caller-supplied rate limit key.
            limit: Limit to evaluate the stored count against.

        Returns:
            Storage Result unchanged, or Failure(ValidationError).
        """
        error = _validate_key(key) or _validate_limit(limit)
        if error is not None:
            return Failure(error=error)

        return await self._storage.get_status(key, limit)

    async def reset_limit(self, *, key: str) -> Result[None, DomainError]:
        """Validate and clear all state for `key`.

        Returns:
            Storage Result unchanged (Failure(NotFoundError) when the key had
            no state), or Failure(ValidationError).
        """
        error = _validate_key(key)
        if error is not None:
            return Failure(error=error)

        return await self._storage.reset(key)


def _validate_key(key: str) -> ValidationError | None:
    if not key or not key.strip():
        return ValidationError(
            code=ErrorCode.INVALID_KEY,
            message="key must not be empty",
            field="key",
        )
    return None


def _validate_limit(limit: int) -> ValidationError | None:
    if limit <= 0:
        return ValidationError(
            code=ErrorCode.INVALID_LIMIT,
            message="limit must be greater than zero",
            field="limit",
            details={"limit": str(limit)},
        )
    return None


def _validate_window(window: timedelta) -> ValidationError | None:
    if window <= timedelta(0):
        return ValidationError(
            code=ErrorCode.INVALID_WINDOW,
            message="window must be greater than zero",
            field="window",
            details={"window_seconds": str(window.total_seconds())},
        )
    return None


def _validate_cost(cost: int) -> ValidationError | None:
    if cost <= 0:
        return ValidationError(
            code=ErrorCode.INVALID_COST,
            message="cost must be greater than zero",
            field="cost",
            details={"cost": str(cost)},
        )
    return None
