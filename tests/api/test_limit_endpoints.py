"""API tests for the /v1/limit endpoints.

The service is real and backed by InMemoryStorage through dependency
overrides; the logger is a MagicMock so log calls can be asserted.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ratelimit_service.application.services.rate_limiter_service import (
    RateLimiterService,
)
from ratelimit_service.core.container import get_logger, get_rate_limiter_service
from ratelimit_service.core.enums import ErrorCode
from ratelimit_service.core.result import Failure
from ratelimit_service.domain.errors import RateLimitError
from ratelimit_service.infrastructure.rate_limit import InMemoryStorage
from ratelimit_service.main import app


@pytest.fixture
def mock_logger():
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def client(mock_logger):
    service = RateLimiterService(storage=InMemoryStorage(key_prefix="api:"))
    app.dependency_overrides[get_rate_limiter_service] = lambda: service
    app.dependency_overrides[get_logger] = lambda: mock_logger

    yield TestClient(app)

    app.dependency_overrides.clear()


def _check(client, key="user:42", limit=2, window_seconds=60, **extra):
    body = {"key": key, "limit": limit, "window_seconds": window_seconds, **extra}
    return client.post("/v1/limit/check", json=body)


@pytest.mark.api
class TestCheckEndpoint:
    """Tests for POST /v1/limit/check."""

    def test_allowed_request_returns_200_with_headers(self, client):
        response = _check(client)

        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is True
        assert data["remaining"] == 1
        assert data["limit"] == 2
        assert data["retry_after_seconds"] == 0
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "1"
        assert int(response.headers["X-RateLimit-Reset"]) > 0
        assert "Retry-After" not in response.headers

    def test_over_limit_returns_429_with_retry_after(self, client):
        _check(client)
        _check(client)

        response = _check(client)

        assert response.status_code == 429
        data = response.json()
        assert data["allowed"] is False
        assert data["remaining"] == 0
        assert 0 < int(response.headers["Retry-After"]) <= 60
        assert data["retry_after_seconds"] == int(response.headers["Retry-After"])

    def test_cost_is_applied(self, client):
        response = _check(client, limit=10, cost=7)

        assert response.json()["remaining"] == 3

    def test_omitted_cost_charges_one_unit(self, client):
        first = _check(client, limit=3)
        second = _check(client, limit=3)

        assert first.json()["remaining"] == 2
        assert second.json()["remaining"] == 1

    def test_zero_cost_rejected(self, client):
        response = _check(client, cost=0)

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_cost"

    @pytest.mark.parametrize(
        ("overrides", "code"),
        [
            ({"key": "  "}, "invalid_key"),
            ({"limit": 0}, "invalid_limit"),
            ({"window_seconds": 0}, "invalid_window"),
            ({"cost": -1}, "invalid_cost"),
        ],
    )
    def test_invalid_arguments_return_400_problem(
        self, client, mock_logger, overrides, code
    ):
        response = _check(client, **overrides)

        assert response.status_code == 400
        problem = response.json()
        assert problem["type"] == f"/errors/{code}"
        assert problem["status"] == 400
        assert problem["instance"] == "/v1/limit/check"
        assert problem["errors"][0]["code"] == code
        mock_logger.info.assert_called()

    def test_malformed_body_returns_400(self, client):
        response = client.post("/v1/limit/check", json={"key": "k", "limit": "many"})

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert "limit" in fields
        assert "window_seconds" in fields

    def test_backend_failure_returns_500(self, mock_logger):
        service = AsyncMock(spec=RateLimiterService)
        service.check_rate_limit.return_value = Failure(
            error=RateLimitError(
                code=ErrorCode.RATE_LIMIT_STORAGE_UNAVAILABLE,
                message="Rate limit check failed: connection refused",
            )
        )
        app.dependency_overrides[get_rate_limiter_service] = lambda: service
        app.dependency_overrides[get_logger] = lambda: mock_logger
        try:
            response = _check(TestClient(app))
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["type"] == "/errors/rate_limit_storage_unavailable"
        mock_logger.error.assert_called_once()


@pytest.mark.api
class TestStatusEndpoint:
    """Tests for GET /v1/limit/status."""

    def test_status_of_unknown_key(self, client):
        response = client.get("/v1/limit/status", params={"key": "new", "limit": 5})

        assert response.status_code == 200
        data = response.json()
        assert data["allowed"] is True
        assert data["current"] == 0
        assert data["remaining"] == 5

    def test_status_reflects_consumption_without_consuming(self, client):
        _check(client, key="k", limit=5, cost=2)

        first = client.get("/v1/limit/status", params={"key": "k", "limit": 5})
        second = client.get("/v1/limit/status", params={"key": "k", "limit": 5})

        assert first.json()["current"] == 2
        assert first.json()["remaining"] == 3
        assert second.json()["remaining"] == 3
        assert first.headers["X-RateLimit-Remaining"] == "3"

    def test_missing_limit_returns_400(self, client):
        response = client.get("/v1/limit/status", params={"key": "k"})

        assert response.status_code == 400
        assert response.json()["type"] == "/errors/invalid_limit"

    def test_non_integer_limit_returns_400(self, client):
        response = client.get("/v1/limit/status", params={"key": "k", "limit": "x"})

        assert response.status_code == 400


@pytest.mark.api
class TestResetEndpoint:
    """Tests for DELETE /v1/limit/reset."""

    def test_reset_existing_key_returns_204(self, client, mock_logger):
        _check(client, key="k")

        response = client.delete("/v1/limit/reset", params={"key": "k"})

        assert response.status_code == 204
        assert response.content == b""
        mock_logger.bind.assert_any_call(route="reset", key="k")
        mock_logger.info.assert_any_call("Rate limit reset")

    def test_reset_unknown_key_returns_404(self, client, mock_logger):
        response = client.delete("/v1/limit/reset", params={"key": "ghost"})

        assert response.status_code == 404
        assert response.json()["type"] == "/errors/key_not_found"
        mock_logger.warning.assert_called_once()

    def test_reset_without_key_returns_400(self, client):
        response = client.delete("/v1/limit/reset")

        assert response.status_code == 400
        assert response.json()["type"] == "/errors/invalid_key"


@pytest.mark.api
class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
