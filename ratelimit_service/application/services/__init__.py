"""Application services."""

from ratelimit_service.application.services.rate_limiter_service import (
    RateLimiterService,
)

__all__ = ["RateLimiterService"]
