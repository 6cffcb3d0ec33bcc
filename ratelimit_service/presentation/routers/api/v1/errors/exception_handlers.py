"""Global exception handlers for the FastAPI application.

Handlers:
    validation_exception_handler: Malformed request (bad JSON, missing or
        non-integer parameters) -> 400 Problem Details
    generic_exception_handler: Any unhandled exception -> 500 Problem Details

Exports:
    register_exception_handlers: Register all exception handlers with FastAPI app
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ratelimit_service.core.container import get_logger
from ratelimit_service.presentation.routers.api.v1.errors.problem_details import (
    ErrorDetail,
    ProblemDetails,
)


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert RequestValidationError to a 400 Problem Details response.

    Args:
        request: FastAPI Request object.
        exc: RequestValidationError from request parsing.

    Returns:
        JSONResponse with ProblemDetails including field errors.
    """
    assert isinstance(exc, RequestValidationError)

    field_errors: list[ErrorDetail] = []
    for error in exc.errors():
        # ["body", "limit"] -> "limit"
        loc = error.get("loc", [])
        field_parts = [str(p) for p in loc if p not in ("body", "query")]
        field_name = ".".join(field_parts) if field_parts else "unknown"

        field_errors.append(
            ErrorDetail(
                field=field_name,
                code=error.get("type", "validation_error"),
                message=error.get("msg", "Validation failed"),
            )
        )

    problem = ProblemDetails(
        type="/errors/bad-request",
        title="Bad Request",
        status=status.HTTP_400_BAD_REQUEST,
        detail="Request could not be parsed. Check 'errors' for details.",
        instance=str(request.url.path),
        errors=field_errors if field_errors else None,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=problem.model_dump(exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert an unhandled exception to a 500 Problem Details response.

    The exception is logged; its details are not exposed to the client.
    """
    get_logger().error(
        "Unhandled exception",
        error=exc,
        request_path=request.url.path,
        request_method=request.method,
    )

    problem = ProblemDetails(
        type="/errors/internal-server-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred.",
        instance=str(request.url.path),
        errors=None,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem.model_dump(exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
