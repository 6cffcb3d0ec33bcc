"""Common error classes shared by every layer.

Error Types:
- ValidationError: Caller input failed validation (never retried)
- NotFoundError: Operation targeted state that does not exist

Usage:
    return Failure(error=ValidationError(
        code=ErrorCode.INVALID_LIMIT,
        message="limit must be greater than zero",
        field="limit",
    ))
"""

from dataclasses import dataclass

from ratelimit_service.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Input validation failure.

    Attributes:
        code: ErrorCode enum (one of the INVALID_* codes).
        message: Human-readable message.
        field: Argument name that failed validation.
        details: Additional context.
    """

    field: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NotFoundError(DomainError):
    """Resource not found.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        resource_type: Type of resource (e.g. "rate_limit_key").
        resource_id: Identifier of the resource that was not found.
        details: Additional context.
    """

    resource_type: str
    resource_id: str
