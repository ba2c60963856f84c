"""
Tests for health check endpoints.
"""

import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_health_check(async_client):
    response = await async_client.get("/api/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_database_health_check(async_client):
    response = await async_client.get("/api/health/db")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "database": "connected"}


@pytest.mark.asyncio
async def test_security_headers(async_client):
    response = await async_client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["x-content-type-options"] == "nosniff"
    assert "docs" in response.json()
