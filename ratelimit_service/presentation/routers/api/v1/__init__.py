"""API v1 routers."""

from fastapi import APIRouter

from ratelimit_service.presentation.routers.api.v1.limits import router as limits_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(limits_router)

__all__ = ["v1_router"]
