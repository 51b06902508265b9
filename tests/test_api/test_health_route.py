"""Tests for the health endpoint."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from skillswap.api.app import create_app
from skillswap.api.dependencies import get_database
from skillswap.api.routes import health as health_routes


def _mock_db(healthy: bool = True):
    db = AsyncMock()
    db.health_check = AsyncMock(return_value=healthy)
    return db


def _make_client(db_healthy: bool = True) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_database] = lambda: _mock_db(db_healthy)
    return TestClient(app)


@pytest.fixture
def redis_backend(monkeypatch):
    """Use the redis question cache with a mocked client."""
    monkeypatch.setenv("ASSIGNMENTS_CACHE_BACKEND", "redis")
    redis_client = AsyncMock()
    redis_client.ping = AsyncMock(return_value=True)

    async def _get_redis_client():
        return redis_client

    monkeypatch.setattr(health_routes, "get_redis_client", _get_redis_client)
    return redis_client


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, monkeypatch):
        monkeypatch.setenv("ASSIGNMENTS_CACHE_BACKEND", "memory")

        data = _make_client().get("/health").json()

        assert data["status"] == "healthy"
        assert set(data["components"]) == {"database"}

    def test_database_down_is_unhealthy(self, monkeypatch):
        monkeypatch.setenv("ASSIGNMENTS_CACHE_BACKEND", "memory")

        data = _make_client(db_healthy=False).get("/health").json()

        assert data["status"] == "unhealthy"

    def test_redis_down_is_degraded(self, redis_backend):
        redis_backend.ping.side_effect = ConnectionError("Connection refused")

        data = _make_client().get("/health").json()

        assert data["status"] == "degraded"
        assert data["components"]["redis"]["details"]["error"] == "Connection refused"

    def test_redis_up(self, redis_backend):
        data = _make_client().get("/health").json()

        assert data["status"] == "healthy"
        assert data["components"]["redis"]["status"] == "healthy"
