"""Tests for service endpoints and error envelopes."""

import pytest
from google.api_core.exceptions import ServiceUnavailable
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "Firestore"
    assert "version" in data
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient, firestore) -> None:
    """Test that a failing store degrades the detailed health check."""
    healthy = await client.get("/api/v1/health/detailed")
    firestore.failure = ServiceUnavailable("backend down")
    degraded = await client.get("/api/v1/health/detailed")

    assert healthy.json()["firestore"] == "healthy"
    assert degraded.status_code == 200
    assert degraded.json()["status"] == "degraded"
    assert degraded.json()["firestore"] == "unhealthy"


@pytest.mark.asyncio
async def test_ping_and_root(client: AsyncClient) -> None:
    """Test the liveness endpoints."""
    ping = await client.get("/api/v1/ping")
    root = await client.get("/")

    assert ping.json() == {"message": "pong"}
    assert root.json()["endpoints"]["patients"] == "/api/v1/patients"


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient) -> None:
    """Test the not found envelope for routes."""
    response = await client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"error": "Route /api/v1/nothing-here not found"}
    assert response.headers["content-type"] == "application/json; charset=utf-8"


@pytest.mark.asyncio
async def test_store_failure_returns_500(client: AsyncClient, firestore) -> None:
    """Test that Firestore failures surface as a 500 envelope."""
    firestore.failure = ServiceUnavailable("backend down")

    response = await client.get("/api/v1/patients")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Firestore error"
    assert "backend down" in body["debug"]


@pytest.mark.asyncio
async def test_process_time_header(client: AsyncClient) -> None:
    """Test that responses carry the request duration."""
    response = await client.get("/api/v1/ping")

    assert "x-process-time" in response.headers


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    """Test that a caller supplied request id is returned, and one is made otherwise."""
    tagged = await client.get("/api/v1/ping", headers={"X-Request-ID": "abc-123"})
    untagged = await client.get("/api/v1/ping")

    assert tagged.headers["x-request-id"] == "abc-123"
    assert len(untagged.headers["x-request-id"]) == 32
