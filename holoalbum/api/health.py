"""
Health check endpoints.

Provides liveness and readiness checks with a storage connectivity check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from holoalbum.api.deps import ServiceContainer, get_container
from holoalbum.config import ALBUM_STORAGE_KEY

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    storage: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> HealthResponse:
    """
    Readiness check.

    Checks that storage can be read. Returns 503 if it cannot.
    """
    try:
        await container.storage.get(ALBUM_STORAGE_KEY)
        return HealthResponse(status="ready", storage="connected")
    except Exception:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", storage="disconnected")
