"""
Tests for the FastAPI application and health endpoint.
"""

import pytest
from unittest.mock import patch
from httpx import AsyncClient, ASGITransport
from app.database import RecordStore


@pytest.mark.anyio
async def test_health_endpoint_healthy(seeded_store):
    """Health endpoint should return healthy when data is loaded."""
    with patch("app.main.store", seeded_store):
        from app.main import app
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/health")
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "healthy"
            assert data["service"] == "SalesQL"
            assert data["records"] == {"adSales": 2, "totalSales": 2, "eligibility": 1}


@pytest.mark.anyio
async def test_health_endpoint_degraded():
    """Health endpoint should return degraded when no data is loaded."""
    with patch("app.main.store", RecordStore()):
        from app.main import app
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/health")
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "degraded"
            assert data["records"]["adSales"] == 0
