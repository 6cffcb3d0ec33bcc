"""Rate limit resource router.

HTTP binding for RateLimiterService.

Endpoints:
    POST   /v1/limit/check   - Consume units (200 allowed, 429 denied)
    GET    /v1/limit/status  - Read state without consuming
    DELETE /v1/limit/reset   - Clear state for a key (204, 404 if absent)

Every decision carries X-RateLimit-Limit, X-RateLimit-Remaining and
X-RateLimit-Reset (unix seconds); denied checks also carry Retry-After.
Errors are RFC 7807 Problem Details (see ErrorResponseBuilder).
"""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, Response

from ratelimit_service.application.services.rate_limiter_service import (
    RateLimiterService,
)
from ratelimit_service.core.container import get_logger, get_rate_limiter_service
from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.errors import DomainError
from ratelimit_service.core.result import Failure, Success
from ratelimit_service.domain.protocols.logger_protocol import LoggerProtocol
from ratelimit_service.domain.value_objects.rate_limit_result import RateLimitResult
from ratelimit_service.presentation.routers.api.v1.errors import ErrorResponseBuilder
from ratelimit_service.schemas.limit_schemas import (
    CheckRateLimitRequest,
    CheckRateLimitResponse,
    RateLimitStatusResponse,
)

router = APIRouter(prefix="/limit", tags=["Rate Limits"])

ServiceDep = Annotated[RateLimiterService, Depends(get_rate_limiter_service)]
LoggerDep = Annotated[LoggerProtocol, Depends(get_logger)]


@router.post(
    "/check",
    response_model=CheckRateLimitResponse,
    responses={
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": CheckRateLimitResponse},
    },
    summary="Consume units for a key",
)
async def check_rate_limit(
    request: Request,
    body: CheckRateLimitRequest,
    service: ServiceDep,
    logger: LoggerDep,
) -> Response:
    """Consume `cost` units for `key` and return the decision.

    `cost` may be omitted and then defaults to 1. An explicit `cost` of 0 or
    less is rejected with 400 (invalid_cost).

    Returns:
        200 when allowed, 429 when denied (the units are still charged).
    """
    log = logger.bind(route="check", key=body.key)
    result = await service.check_rate_limit(
        key=body.key,
        limit=body.limit,
        window=timedelta(seconds=body.window_seconds),
        cost=body.cost,
    )

    match result:
        case Failure(error=err):
            _log_failure(log, err)
            return ErrorResponseBuilder.from_domain_error(err, request)
        case Success(value=decision):
            retry_after = decision.retry_after_seconds(datetime.now(UTC))
            headers = _rate_limit_headers(decision)
            if not decision.allowed:
                headers["Retry-After"] = str(retry_after)
                log.debug(
                    "Rate limit denied",
                    limit=decision.limit,
                    retry_after_seconds=retry_after,
                )

            payload = CheckRateLimitResponse(
                allowed=decision.allowed,
                remaining=decision.remaining,
                reset_at=decision.reset_at,
                limit=decision.limit,
                retry_after_seconds=retry_after,
            )
            return JSONResponse(
                status_code=(
                    status.HTTP_200_OK
                    if decision.allowed
                    else status.HTTP_429_TOO_MANY_REQUESTS
                ),
                content=payload.model_dump(mode="json"),
                headers=headers,
            )


@router.get(
    "/status",
    response_model=RateLimitStatusResponse,
    summary="Read rate limit state without consuming",
)
async def get_status(
    request: Request,
    service: ServiceDep,
    logger: LoggerDep,
    key: Annotated[str, Query(description="Rate limit key")] = "",
    limit: Annotated[int, Query(description="Limit to evaluate against")] = 0,
) -> Response:
    """Return the current state of `key`. Always 200 on success."""
    log = logger.bind(route="status", key=key)
    result = await service.get_status(key=key, limit=limit)

    match result:
        case Failure(error=err):
            _log_failure(log, err)
            return ErrorResponseBuilder.from_domain_error(err, request)
        case Success(value=decision):
            payload = RateLimitStatusResponse(
                allowed=decision.allowed,
                current=decision.consumed,
                remaining=decision.remaining,
                reset_at=decision.reset_at,
                limit=decision.limit,
            )
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content=payload.model_dump(mode="json"),
                headers=_rate_limit_headers(decision),
            )


@router.delete(
    "/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear rate limit state for a key",
)
async def reset_limit(
    request: Request,
    service: ServiceDep,
    logger: LoggerDep,
    key: Annotated[str, Query(description="Rate limit key")] = "",
) -> Response:
    """Delete all state for `key`."""
    log = logger.bind(route="reset", key=key)
    result = await service.reset_limit(key=key)

    match result:
        case Failure(error=err):
            _log_failure(log, err)
            return ErrorResponseBuilder.from_domain_error(err, request)
        case Success():
            log.info("Rate limit reset")
            return Response(status_code=status.HTTP_204_NO_CONTENT)


def _rate_limit_headers(decision: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(int(decision.reset_at.timestamp())),
    }


def _log_failure(logger: LoggerProtocol, error: DomainError) -> None:
    """Log a failed Result at a level matching who is at fault."""
    if error.code.is_validation_error:
        logger.info("Rate limit request rejected", error_code=error.code.value)
    elif error.code is ErrorCode.KEY_NOT_FOUND:
        logger.warning("Rate limit key not found")
    else:
        logger.error("Rate limit backend failure", error=error)
