"""
Main FastAPI application entry point.

Wires the rate limiter HTTP binding to the storage selected in settings.

Lifespan:
    - Startup: build the configured storage; for Redis, ping it and refuse
      to start if it is unreachable
    - Shutdown: close the storage (releases the Redis connection pool)

Run:
    uvicorn ratelimit_service.main:app --host 0.0.0.0 --port 8080
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ratelimit_service.core.config import settings
from ratelimit_service.core.container import get_logger, get_storage
from ratelimit_service.core.result import Failure
from ratelimit_service.infrastructure.rate_limit.redis_storage import RedisStorage
from ratelimit_service.presentation.routers.api.v1 import v1_router
from ratelimit_service.presentation.routers.api.v1.errors import (
    register_exception_handlers,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.

    Raises:
        RuntimeError: If the Redis backend is unreachable at startup.
    """
    logger = get_logger()
    storage = get_storage()
    logger.info(
        "Rate limit storage selected",
        backend=settings.rate_limit_backend.value,
        consistency=settings.rate_limit_consistency.value,
    )

    if isinstance(storage, RedisStorage):
        match await storage.ping():
            case Failure(error=err):
                logger.critical("Redis unreachable at startup", error=err)
                raise RuntimeError(f"Failed to connect to Redis: {err.message}")
        logger.info("Redis connection established")

    yield

    match await storage.close():
        case Failure(error=err):
            logger.error("Rate limit storage close failed", error=err)
        case _:
            logger.info("Rate limit storage closed")


app = FastAPI(
    title=settings.app_name,
    description="Distributed per-key rate limiting service",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(v1_router)


@app.get("/health")
async def health() -> dict[str, str]:
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        dict: Health status indicator.
    """
    return {"status": "healthy"}
