"""Health endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness_memory_backend(client: AsyncClient) -> None:
    """The memory backend has no external dependencies to check."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {}}


@pytest.mark.asyncio
async def test_readiness_reports_redis_failure(client: AsyncClient, monkeypatch) -> None:
    """An unreachable Redis degrades readiness instead of failing the probe."""
    from graspify.config import get_settings

    monkeypatch.setattr(get_settings(), "redis_url", "redis://localhost:1/0")
    response = await client.get("/ready")
    data = response.json()
    assert response.status_code == 200
    assert data["status"] == "degraded"
    assert data["checks"]["redis"].startswith("error:")


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns version, environment and store backend."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["store_backend"] == "memory"
    assert "environment" in data
