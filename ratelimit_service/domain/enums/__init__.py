"""Domain enums for rate limiting."""

from ratelimit_service.domain.enums.consistency_mode import ConsistencyMode
from ratelimit_service.domain.enums.storage_backend import StorageBackend

__all__ = ["ConsistencyMode", "StorageBackend"]
