"""Unit tests for Settings."""

import pytest
from pydantic import ValidationError

from ratelimit_service.core.config import Settings, get_settings
from ratelimit_service.core.enums import Environment
from ratelimit_service.domain.enums import ConsistencyMode, StorageBackend


@pytest.mark.unit
class TestSettingsDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch):
        for name in ("RATE_LIMIT_BACKEND", "RATE_LIMIT_CONSISTENCY", "REDIS_KEY_PREFIX"):
            monkeypatch.delenv(name, raising=False)

        config = Settings()

        assert config.rate_limit_backend is StorageBackend.REDIS
        assert config.rate_limit_consistency is ConsistencyMode.NON_ATOMIC
        assert config.redis_key_prefix == "ratelimit:"
        assert config.redis_max_connections == 50
        assert config.port == 8080

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Tests for environment variable overrides."""

    def test_backend_and_consistency_from_env(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_BACKEND", "token_bucket")
        monkeypatch.setenv("RATE_LIMIT_CONSISTENCY", "atomic")
        monkeypatch.setenv("REDIS_KEY_PREFIX", "svc:")

        config = Settings()

        assert config.rate_limit_backend is StorageBackend.TOKEN_BUCKET
        assert config.rate_limit_consistency is ConsistencyMode.ATOMIC
        assert config.redis_key_prefix == "svc:"

    def test_environment_flags(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")

        config = Settings()

        assert config.environment is Environment.PRODUCTION
        assert config.is_production is True
        assert config.is_development is False

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert Settings().log_level == "DEBUG"


@pytest.mark.unit
class TestSettingsValidation:
    """Tests for rejected values."""

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_backend="memcached")

    def test_empty_key_prefix_rejected(self):
        with pytest.raises(ValidationError):
            Settings(redis_key_prefix="  ")

    @pytest.mark.parametrize(
        "field", ["redis_max_connections", "redis_socket_timeout"]
    )
    def test_non_positive_pool_values_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})
