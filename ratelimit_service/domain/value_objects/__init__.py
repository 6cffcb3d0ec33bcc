"""Domain value objects."""

from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult

__all__ = ["RateLimitResult"]
