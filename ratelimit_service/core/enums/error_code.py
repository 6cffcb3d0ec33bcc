"""Machine-readable error codes.

This is the closed set of error kinds the rate limiter can report. Transport
adapters match on the code (never on error object identity) to choose a
status code.

Categories:
- Validation errors (INVALID_*): caller supplied malformed arguments
- Resource errors (*_NOT_FOUND): reset targeted a key with no state
- Backend errors (RATE_LIMIT_*): store unreachable or returned bad data
"""

from enum import Enum


class ErrorCode(Enum):
    """Rate limiter error codes (ENTITY_ACTION_REASON naming)."""

    # Validation errors
    INVALID_KEY = "invalid_key"
    INVALID_LIMIT = "invalid_limit"
    INVALID_WINDOW = "invalid_window"
    INVALID_COST = "invalid_cost"

    # Resource errors
    KEY_NOT_FOUND = "key_not_found"

    # Backend errors
    RATE_LIMIT_STORAGE_UNAVAILABLE = "rate_limit_storage_unavailable"
    RATE_LIMIT_CORRUPT_VALUE = "rate_limit_corrupt_value"
    RATE_LIMIT_CLOSE_FAILED = "rate_limit_close_failed"

    @property
    def is_validation_error(self) -> bool:
        """True for errors caused by malformed caller input."""
        return self in _VALIDATION_CODES


_VALIDATION_CODES = frozenset(
    {
        ErrorCode.INVALID_KEY,
        ErrorCode.INVALID_LIMIT,
        ErrorCode.INVALID_WINDOW,
        ErrorCode.INVALID_COST,
    }
)
