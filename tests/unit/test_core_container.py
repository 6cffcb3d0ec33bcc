"""Unit tests for the dependency container factories."""

from unittest.mock import patch

import pytest

from ratelimit_service.application.services.rate_limiter_service import (
    RateLimiterService,
)
from ratelimit_service.core.config import Settings
from ratelimit_service.core.container import (
    get_logger,
    get_rate_limiter_service,
    get_storage,
)
from ratelimit_service.domain.enums import ConsistencyMode, StorageBackend
from ratelimit_service.infrastructure.logging.console_adapter import ConsoleAdapter
from ratelimit_service.infrastructure.rate_limit import (
    InMemoryStorage,
    RedisStorage,
    TokenBucketStorage,
)

SETTINGS_PATH = "ratelimit_service.core.container.infrastructure.settings"


@pytest.fixture(autouse=True)
def clear_caches():
    get_storage.cache_clear()
    get_rate_limiter_service.cache_clear()
    get_logger.cache_clear()
    yield
    get_storage.cache_clear()
    get_rate_limiter_service.cache_clear()
    get_logger.cache_clear()


@pytest.mark.unit
class TestGetStorage:
    """Tests for backend selection."""

    @pytest.mark.parametrize(
        ("backend", "expected_type"),
        [
            (StorageBackend.MEMORY, InMemoryStorage),
            (StorageBackend.TOKEN_BUCKET, TokenBucketStorage),
            (StorageBackend.REDIS, RedisStorage),
        ],
    )
    def test_backend_selected_from_settings(self, backend, expected_type):
        config = Settings(rate_limit_backend=backend)

        with patch(SETTINGS_PATH, config):
            storage = get_storage()

        assert isinstance(storage, expected_type)

    def test_redis_storage_uses_configured_prefix_and_mode(self):
        config = Settings(
            rate_limit_backend=StorageBackend.REDIS,
            rate_limit_consistency=ConsistencyMode.ATOMIC,
            redis_key_prefix="svc:",
        )

        with patch(SETTINGS_PATH, config):
            storage = get_storage()

        assert storage.key_prefix == "svc:"
        assert storage.consistency is ConsistencyMode.ATOMIC

    def test_storage_is_singleton(self):
        with patch(SETTINGS_PATH, Settings(rate_limit_backend=StorageBackend.MEMORY)):
            assert get_storage() is get_storage()


@pytest.mark.unit
class TestGetRateLimiterService:
    """Tests for the service factory."""

    def test_service_wraps_configured_storage(self):
        with patch(SETTINGS_PATH, Settings(rate_limit_backend=StorageBackend.MEMORY)):
            service = get_rate_limiter_service()

        assert isinstance(service, RateLimiterService)
        assert service._storage is get_storage()


@pytest.mark.unit
class TestGetLogger:
    """Tests for the logger factory."""

    def test_returns_console_adapter(self):
        assert isinstance(get_logger(), ConsoleAdapter)
