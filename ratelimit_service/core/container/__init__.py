"""Container module - Centralized dependency injection.

Re-exports the factory functions so callers can write:

    from ratelimit_service.core.container import get_logger, get_rate_limiter_service
"""

from ratelimit_service.core.container.infrastructure import (
    get_logger,
    get_rate_limiter_service,
    get_storage,
)

__all__ = [
    "get_logger",
    "get_rate_limiter_service",
    "get_storage",
]
