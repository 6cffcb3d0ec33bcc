"""Rate limit storage adapters.

Each adapter implements RateLimitStorageProtocol structurally.

Exports:
    RedisStorage: Distributed fixed window on Redis.
    InMemoryStorage: Process-local fixed window.
    TokenBucketStorage: Process-local token buckets, one per key.
"""

from ratelimit_service.infrastructure.rate_limit.memory_storage import InMemoryStorage
from ratelimit_service.infrastructure.rate_limit.redis_storage import RedisStorage
from ratelimit_service.infrastructure.rate_limit.token_bucket_storage import (
    TokenBucketStorage,
)

__all__ = [
    "InMemoryStorage",
    "RedisStorage",
    "TokenBucketStorage",
]
