"""Available storage backends for the rate limiter."""

from enum import Enum


class StorageBackend(str, Enum):
    """Storage backend selection.

    REDIS: Distributed fixed window shared across processes.
    MEMORY: Process-local fixed window (single instance, tests).
    TOKEN_BUCKET: Process-local token buckets, one per key.
    """

    REDIS = "redis"
    MEMORY = "memory"
    TOKEN_BUCKET = "token_bucket"
