"""Error response builder for RFC 7807 Problem Details.

Maps domain errors to HTTP responses by matching on the error code:

    INVALID_KEY / INVALID_LIMIT / INVALID_WINDOW / INVALID_COST -> 400
    KEY_NOT_FOUND                                              -> 404
    anything else (backend failures)                           -> 500

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError, ValidationError
from ratelimit_service.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses from domain errors."""

    @staticmethod
    def from_domain_error(error: DomainError, request: Request) -> JSONResponse:
        """Convert a DomainError to an RFC 7807 JSON response.

        Args:
            error: Error returned by the rate limiter service.
            request: FastAPI Request object (for instance URL).

        Returns:
            JSONResponse with ProblemDetails content.
        """
        status_code = ErrorResponseBuilder.get_status_code(error.code)
        problem = ProblemDetails(
            type=f"/errors/{error.code.value}",
            title=_TITLES.get(status_code, "Internal Server Error"),
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            errors=None,
        )

        if isinstance(error, ValidationError) and error.field:
            problem.errors = [
                ErrorDetail(
                    field=error.field,
                    code=error.code.value,
                    message=error.message,
                )
            ]

        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
        )

    @staticmethod
    def get_status_code(code: ErrorCode) -> int:
        """Map an error code to an HTTP status code.

        Example:
            >>> ErrorResponseBuilder.get_status_code(ErrorCode.KEY_NOT_FOUND)
            404
        """
        match code:
            case (
                ErrorCode.INVALID_KEY
                | ErrorCode.INVALID_LIMIT
                | ErrorCode.INVALID_WINDOW
                | ErrorCode.INVALID_COST
            ):
                return status.HTTP_400_BAD_REQUEST
            case ErrorCode.KEY_NOT_FOUND:
                return status.HTTP_404_NOT_FOUND
            case _:
                return status.HTTP_500_INTERNAL_SERVER_ERROR


_TITLES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "Validation Failed",
    status.HTTP_404_NOT_FOUND: "Resource Not Found",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
}
