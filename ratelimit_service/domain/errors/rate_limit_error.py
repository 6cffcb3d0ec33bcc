"""Rate limit backend error types.

Used when a storage backend cannot complete an operation (Redis connection
lost, protocol error, unparsable counter value).

Usage:
    from ratelimit_service.domain.errors import RateLimitError
    from ratelimit_service.core.enums import ErrorCode
    from ratelimit_service.core.result import Failure

    return Failure(error=RateLimitError(
        code=ErrorCode.RATE_LIMIT_STORAGE_UNAVAILABLE,
        message="Failed to check rate limit: Redis connection lost",
    ))
"""

from dataclasses import dataclass

from ratelimit_service.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitError(DomainError):
    """Rate limit backend failure.

    A DENIED request is NOT an error: it is a successful evaluation with
    allowed=False. This type only covers failures of the backend itself.
    The service does not retry these; retry policy belongs to the caller.

    Attributes:
        code: ErrorCode enum (RATE_LIMIT_* codes).
        message: Human-readable message.
        details: Additional context (key, underlying error, etc.).
    """

    pass  # Inherits all fields from DomainError
