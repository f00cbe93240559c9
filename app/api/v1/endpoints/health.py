"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.config import settings
from app.core.firebase import check_firestore_connection
from app.dependencies import FirestoreClient

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    environment: str
    database: str
    timestamp: datetime


class DetailedHealthResponse(HealthResponse):
    """Detailed health check response model."""

    firestore: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Static service metadata
    """
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database="Firestore",
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(client: FirestoreClient) -> DetailedHealthResponse:
    """
    Detailed health check with Firestore status.

    Returns:
        Health status including the document store
    """
    firestore_healthy = await check_firestore_connection(client)

    return DetailedHealthResponse(
        status="healthy" if firestore_healthy else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        database="Firestore",
        timestamp=datetime.now(UTC),
        firestore="healthy" if firestore_healthy else "unhealthy",
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """
    Simple ping endpoint.

    Returns:
        Pong response
    """
    return {"message": "pong"}
