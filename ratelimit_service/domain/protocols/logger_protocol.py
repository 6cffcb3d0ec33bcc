"""LoggerProtocol definition for structured logging.

Backend-agnostic structured logging. Every call is a message plus key-value
context. error() and critical() accept either an exception or a DomainError
taken from a Failure, so the edges can log a Result without unpacking it.

Usage:
    from ratelimit_service.core.container import get_logger

    logger: LoggerProtocol = get_logger()
    logger.info("Rate limit reset", key=key)

    request_logger = logger.bind(route="check", key=key)
    request_logger.error("Rate limit backend failure", error=failure.error)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ratelimit_service.core.errors import DomainError


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    Supports the five standard levels and context binding.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            **context: Structured key-value context fields.
        """
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self,
        message: str,
        /,
        *,
        error: Exception | DomainError | None = None,
        **context: Any,
    ) -> None:
        """Log an error-level message with optional error details.

        Args:
            message: Human-readable message.
            error: Exception (adds error_type and error_message) or
                DomainError (adds error_code and error_message).
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self,
        message: str,
        /,
        *,
        error: Exception | DomainError | None = None,
        **context: Any,
    ) -> None:
        """Log a critical-level message for failures needing intervention."""
        ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Return new logger with permanently bound context.

        The logger it was called on is left unchanged.
        """
        ...
