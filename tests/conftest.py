"""Shared pytest fixtures.

Clocks are injected everywhere so window and refill arithmetic is tested
deterministically:
    - fixed_now / utc_clock: mutable UTC wall clock for storages
    - ns_clock: mutable nanosecond monotonic clock for token buckets
"""

from datetime import UTC, datetime, timedelta

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests with no I/O")
    config.addinivalue_line(
        "markers", "integration: Tests against a Redis-compatible server (fakeredis)"
    )
    config.addinivalue_line(
        "markers", "api: HTTP endpoint tests through the FastAPI TestClient"
    )


class MutableClock:
    """UTC clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class NanosecondClock:
    """Monotonic nanosecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000_000) -> None:
        self.now_ns = start

    def __call__(self) -> int:
        return self.now_ns

    def advance(self, delta: timedelta) -> None:
        self.now_ns += (delta // timedelta(microseconds=1)) * 1_000


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed reference instant for wall-clock assertions."""
    return datetime(2026, 1, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def utc_clock(fixed_now: datetime) -> MutableClock:
    """Mutable UTC clock starting at fixed_now."""
    return MutableClock(fixed_now)


@pytest.fixture
def ns_clock() -> NanosecondClock:
    """Mutable nanosecond clock for TokenBucket."""
    return NanosecondClock()
