"""Rate limit result value object.

Outcome of a status read or a consumption attempt.

Usage:
    from ratelimit_service.domain.value_objects import RateLimitResult

    result = RateLimitResult.evaluate(
        consumed=7,
        limit=10,
        reset_at=datetime.now(UTC) + timedelta(seconds=30),
    )
    assert result.remaining == 3
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitResult:
    """Rate limit evaluation (value object).

    Attributes:
        allowed: True iff the request does not exceed the limit.
        remaining: Units left in the current window, clamped at 0.
        reset_at: UTC instant the current window expires or the bucket next
            refills.
        limit: The limit used for this evaluation (echoed from the caller).
    """

    allowed: bool
    remaining: int
    reset_at: datetime
    limit: int

    @classmethod
    def evaluate(
        cls,
        *,
        consumed: int,
        limit: int,
        reset_at: datetime,
    ) -> "RateLimitResult":
        """Build a fixed-window result from a consumed count.

        A count exactly equal to the limit is still allowed.

        Args:
            consumed: Units consumed so far in the window (post-increment).
            limit: Maximum units per window.
            reset_at: When the window expires.

        Returns:
            RateLimitResult with allowed and remaining derived from consumed.
        """
        return cls(
            allowed=consumed <= limit,
            remaining=max(0, limit - consumed),
            reset_at=reset_at,
            limit=limit,
        )

    @property
    def consumed(self) -> int:
        """Units consumed in the current window (limit - remaining)."""
        return self.limit - self.remaining

    def retry_after_seconds(self, now: datetime) -> int:
        """Whole seconds until the window resets, 0 when allowed.

        Args:
            now: Current UTC time.

        Returns:
            Non-negative number of seconds.
        """
        if self.allowed:
            return 0
        return max(0, int((self.reset_at - now).total_seconds()))
