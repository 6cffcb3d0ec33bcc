"""Rate limiting algorithms that run without an external store."""

from ratelimit_service.domain.algorithms.token_bucket import TokenBucket

__all__ = ["TokenBucket"]
