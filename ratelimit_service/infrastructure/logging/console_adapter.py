"""Console logging adapter.

Outputs structured logs to stdout using structlog.
- Development: human-readable console renderer with colors
- Testing/CI/production: JSON renderer for machine parsing

error() and critical() flatten their `error` argument into fields:
    Exception    -> error_type, error_message
    DomainError  -> error_code, error_message (plus details when present)

Implementation intentionally does NOT inherit from LoggerProtocol (PEP 544
structural subtyping).
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from ratelimit_service.core.errors import DomainError


class ConsoleAdapter:
    """Console logger.

    Args:
        use_json (bool): JSON output when True, human-readable when False.
        level (str): Minimum level name (DEBUG, INFO, ...). Unknown names
            fall back to INFO.
        service (str | None): Bound to every entry as `service` when given.
    """

    def __init__(
        self,
        *,
        use_json: bool = False,
        level: str = "INFO",
        service: str | None = None,
    ) -> None:
        processors: list[structlog.types.Processor] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ]
        processors.append(
            structlog.processors.JSONRenderer()
            if use_json
            else structlog.dev.ConsoleRenderer(colors=True)
        )

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(
                logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
            ),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
            cache_logger_on_first_use=True,
        )

        logger = structlog.get_logger()
        self._logger = logger.bind(service=service) if service else logger

    def debug(self, message: str, /, **context: Any) -> None:
        self._logger.debug(message, **context)

    def info(self, message: str, /, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(
        self,
        message: str,
        /,
        *,
        error: Exception | DomainError | None = None,
        **context: Any,
    ) -> None:
        """Log an error message with optional error details."""
        self._logger.error(message, **context, **_error_fields(error))

    def critical(
        self,
        message: str,
        /,
        *,
        error: Exception | DomainError | None = None,
        **context: Any,
    ) -> None:
        """Log a critical message with optional error details."""
        self._logger.critical(message, **context, **_error_fields(error))

    def bind(self, **context: Any) -> ConsoleAdapter:
        """Return new adapter with `context` attached to every entry."""
        bound_adapter = ConsoleAdapter.__new__(ConsoleAdapter)
        bound_adapter._logger = self._logger.bind(**context)
        return bound_adapter


def _error_fields(error: Exception | DomainError | None) -> dict[str, Any]:
    if error is None:
        return {}
    if isinstance(error, DomainError):
        fields: dict[str, Any] = {
            "error_code": error.code.value,
            "error_message": error.message,
        }
        if error.details:
            fields["error_details"] = error.details
        return fields
    return {"error_type": type(error).__name__, "error_message": str(error)}
