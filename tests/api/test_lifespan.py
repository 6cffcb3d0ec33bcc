"""API tests for application startup and shutdown."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.result import Failure, Success
from ratelimit_service.domain.errors import RateLimitError
from ratelimit_service.infrastructure.rate_limit import InMemoryStorage, RedisStorage
from ratelimit_service.main import app


@pytest.mark.api
class TestLifespan:
    """Tests for the lifespan context manager."""

    def test_storage_closed_on_shutdown(self):
        storage = AsyncMock(spec=InMemoryStorage)
        storage.close.return_value = Success(value=None)
        logger = MagicMock()

        with (
            patch("ratelimit_service.main.get_storage", return_value=storage),
            patch("ratelimit_service.main.get_logger", return_value=logger),
        ):
            with TestClient(app) as client:
                assert client.get("/health").status_code == 200
                storage.close.assert_not_awaited()

        storage.close.assert_awaited_once()
        logger.info.assert_any_call("Rate limit storage closed")

    def test_redis_pinged_on_startup(self):
        storage = AsyncMock(spec=RedisStorage)
        storage.ping.return_value = Success(value=None)
        storage.close.return_value = Success(value=None)

        with (
            patch("ratelimit_service.main.get_storage", return_value=storage),
            patch("ratelimit_service.main.get_logger", return_value=MagicMock()),
        ):
            with TestClient(app):
                storage.ping.assert_awaited_once()

    def test_unreachable_redis_aborts_startup(self):
        storage = AsyncMock(spec=RedisStorage)
        storage.ping.return_value = Failure(
            error=RateLimitError(
                code=ErrorCode.RATE_LIMIT_STORAGE_UNAVAILABLE,
                message="Rate limit ping failed: connection refused",
            )
        )
        logger = MagicMock()

        with (
            patch("ratelimit_service.main.get_storage", return_value=storage),
            patch("ratelimit_service.main.get_logger", return_value=logger),
        ):
            with pytest.raises(RuntimeError, match="Failed to connect to Redis"):
                with TestClient(app):
                    pass

        logger.critical.assert_called_once()

    def test_close_failure_is_logged(self):
        storage = AsyncMock(spec=InMemoryStorage)
        storage.close.return_value = Failure(
            error=RateLimitError(
                code=ErrorCode.RATE_LIMIT_CLOSE_FAILED,
                message="Failed to close Redis connection: already gone",
            )
        )
        logger = MagicMock()

        with (
            patch("ratelimit_service.main.get_storage", return_value=storage),
            patch("ratelimit_service.main.get_logger", return_value=logger),
        ):
            with TestClient(app):
                pass

        logger.error.assert_called_once()
