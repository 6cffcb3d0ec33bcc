"""Rate limit request/response schemas.

Pydantic models for the HTTP binding. Numeric arguments are deliberately
unconstrained here: range checks belong to RateLimiterService so every
violation reports its own error code.

Endpoints:
    POST   /v1/limit/check   - Consume units and get a decision
    GET    /v1/limit/status  - Read current state without consuming
    DELETE /v1/limit/reset   - Clear state for a key
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CheckRateLimitRequest(BaseModel):
    """Request body for POST /v1/limit/check."""

    key: str = Field(..., description="Rate limit key (e.g. 'user:42')")
    limit: int = Field(..., description="Maximum units per window")
    window_seconds: int = Field(..., description="Window length in seconds")
    cost: int = Field(
        default=1,
        description="Units this request consumes; 1 when omitted, must be > 0",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "key": "user:42",
                "limit": 100,
                "window_seconds": 60,
                "cost": 1,
            }
        }
    )


class CheckRateLimitResponse(BaseModel):
    """Decision for a consumption attempt."""

    allowed: bool = Field(..., description="Whether the request is within the limit")
    remaining: int = Field(..., description="Units left in the current window")
    reset_at: datetime = Field(..., description="When the window resets (UTC)")
    limit: int = Field(..., description="Limit used for this evaluation")
    retry_after_seconds: int = Field(
        default=0,
        description="Seconds until the window resets (0 when allowed)",
    )


class RateLimitStatusResponse(BaseModel):
    """Current state of a key."""

    allowed: bool = Field(..., description="Whether the key is within its limit")
    current: int = Field(..., description="Units consumed in the current window")
    remaining: int = Field(..., description="Units left in the current window")
    reset_at: datetime = Field(..., description="When the window resets (UTC)")
    limit: int = Field(..., description="Limit used for this evaluation")
