"""RFC 7807 error response schemas and exception handlers.

Exports:
    ErrorDetail: Individual field-specific error
    ProblemDetails: RFC 7807 compliant error response schema
    ErrorResponseBuilder: Builds RFC 7807 responses from domain errors
    register_exception_handlers: Register global exception handlers with FastAPI
"""

from ratelimit_service.presentation.routers.api.v1.errors.error_response_builder import (
    ErrorResponseBuilder,
)
from ratelimit_service.presentation.routers.api.v1.errors.exception_handlers import (
    register_exception_handlers,
)
from ratelimit_service.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponseBuilder",
    "ProblemDetails",
    "register_exception_handlers",
]
