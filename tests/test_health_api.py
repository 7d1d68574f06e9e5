"""Tests for health check endpoints"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient
from fastapi import status

from atelier.api.health import VERSION
from atelier.services.s3_service import S3ConnectionError


@pytest.mark.asyncio
class TestBasicHealthCheck:
    """Test basic health check endpoint"""

    async def test_basic_health_check(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["timestamp"].endswith("Z")


@pytest.mark.asyncio
class TestDetailedHealthCheck:
    """GET /api/health"""

    async def test_all_services_connected(self, async_client: AsyncClient):
        with patch("atelier.api.health.S3Service") as mock_s3:
            response = await async_client.get("/api/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == VERSION
        assert data["services"] == {
            "database": "connected",
            "redis": "connected",
            "s3": "connected",
        }
        mock_s3.return_value.check_bucket.assert_called_once()

    async def test_storage_down_is_degraded(self, async_client: AsyncClient):
        """A failing dependency degrades the status but the endpoint still answers"""
        with patch("atelier.api.health.S3Service") as mock_s3:
            mock_s3.return_value.check_bucket.side_effect = S3ConnectionError("bucket missing")
            response = await async_client.get("/api/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["s3"].startswith("disconnected")
        assert data["services"]["database"] == "connected"

    async def test_redis_down_is_degraded(self, async_client: AsyncClient, fake_redis):
        async def refuse():
            raise ConnectionError("Connection refused")

        fake_redis.ping = refuse

        with patch("atelier.api.health.S3Service"):
            response = await async_client.get("/api/health")

        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["redis"] == "disconnected: Connection refused"
