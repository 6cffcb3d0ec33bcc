"""Infrastructure dependency factories.

Application-scoped singletons:
- Logging (structlog console adapter)
- Rate limit storage (Redis / in-memory / token bucket)
- Rate limiter service (orchestrator over the configured storage)

The container is the composition root: it is the only place that decides
which storage adapter backs the service. Tests replace these factories
through FastAPI dependency overrides.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from ratelimit_service.core.config import settings
from ratelimit_service.domain.enums import StorageBackend

if TYPE_CHECKING:
    from ratelimit_service.application.services.rate_limiter_service import (
        RateLimiterService,
    )
    from ratelimit_service.domain.protocols.logger_protocol import LoggerProtocol
    from ratelimit_service.domain.protocols.rate_limit_storage_protocol import (
        RateLimitStorageProtocol,
    )


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Get logger singleton (app-scoped).

    Human-readable output in development, JSON everywhere else.

    Returns:
        Logger implementing LoggerProtocol.
    """
    from ratelimit_service.infrastructure.logging.console_adapter import (
        ConsoleAdapter,
    )

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
        service=settings.app_name,
    )


@lru_cache()
def get_storage() -> "RateLimitStorageProtocol":
    """Get rate limit storage singleton (app-scoped).

    Returns the adapter selected by RATE_LIMIT_BACKEND:
        - 'redis': RedisStorage with its own connection pool
        - 'memory': InMemoryStorage
        - 'token_bucket': TokenBucketStorage

    The returned storage owns its resources; the application lifespan
    calls close() on shutdown.

    Returns:
        Storage implementing RateLimitStorageProtocol.
    """
    match settings.rate_limit_backend:
        case StorageBackend.REDIS:
            from ratelimit_service.infrastructure.rate_limit.redis_storage import (
                RedisStorage,
            )

            return RedisStorage.from_url(
                settings.redis_url,
                key_prefix=settings.redis_key_prefix,
                consistency=settings.rate_limit_consistency,
                max_connections=settings.redis_max_connections,
                socket_timeout=settings.redis_socket_timeout,
            )
        case StorageBackend.MEMORY:
            from ratelimit_service.infrastructure.rate_limit.memory_storage import (
                InMemoryStorage,
            )

            return InMemoryStorage(key_prefix=settings.redis_key_prefix)
        case StorageBackend.TOKEN_BUCKET:
            from ratelimit_service.infrastructure.rate_limit.token_bucket_storage import (
                TokenBucketStorage,
            )

            return TokenBucketStorage(key_prefix=settings.redis_key_prefix)


@lru_cache()
def get_rate_limiter_service() -> "RateLimiterService":
    """Get rate limiter service singleton (app-scoped).

    Usage:
        # Presentation Layer (FastAPI Depends)
        service: RateLimiterService = Depends(get_rate_limiter_service)
    """
    from ratelimit_service.application.services.rate_limiter_service import (
        RateLimiterService,
    )

    return RateLimiterService(storage=get_storage())
