"""Core errors package.

Usage:
    from ratelimit_service.core.errors import DomainError, ValidationError, NotFoundError
"""

from ratelimit_service.core.errors.common_errors import (
    NotFoundError,
    ValidationError,
)
from ratelimit_service.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
]
