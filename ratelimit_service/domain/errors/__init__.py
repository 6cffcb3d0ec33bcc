"""Domain errors package."""

from ratelimit_service.domain.errors.rate_limit_error import RateLimitError

__all__ = ["RateLimitError"]
