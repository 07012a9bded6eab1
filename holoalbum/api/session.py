"""
Session API endpoints.

Retry, keep/discard and close for the currently open envelope.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from holoalbum.api.deps import ServiceContainer, get_container
from holoalbum.api.schemas import SessionResponse, session_to_response
from holoalbum.models.errors import DecisionsPendingError, InvalidDecisionError
from holoalbum.services.session import Decision

router = APIRouter(prefix="/session", tags=["session"])


class DecisionRequest(BaseModel):
    """Keep or discard one card."""

    decision: Decision = Field(..., description="keep adds to the album, discard removes it")


class DecisionResponse(BaseModel):
    album_changed: bool
    session: SessionResponse


class CloseResponse(BaseModel):
    envelope_id: str | None
    kept: int
    discarded: int
    failed: int


class DiagnosticsResponse(BaseModel):
    """Card load statistics since startup."""

    total_errors: int
    total_success: int
    avg_load_time_ms: int
    errors_by_category: dict[str, int] = Field(default_factory=dict)
    recent_errors: int
    success_rate: int


@router.get("", response_model=SessionResponse)
async def get_session_state(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> SessionResponse:
    return session_to_response(container.session)


@router.post("/items/{index}/retry", response_model=SessionResponse)
async def retry_item(
    index: int,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> SessionResponse:
    """Retry a single failed card without touching the others."""
    try:
        await container.session.retry(index)
    except IndexError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (ValueError, InvalidDecisionError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return session_to_response(container.session)


@router.post("/items/{index}/decision", response_model=DecisionResponse)
async def decide_item(
    index: int,
    request: DecisionRequest,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> DecisionResponse:
    """Keep or discard a loaded card."""
    try:
        changed = await container.session.decide(index, request.decision)
    except InvalidDecisionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return DecisionResponse(album_changed=changed, session=session_to_response(container.session))


@router.post("/close", response_model=CloseResponse)
async def close_session(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> CloseResponse:
    """
    Close the open envelope.

    Returns 409 while any loaded card is still undecided.
    """
    try:
        summary = container.session.close()
    except DecisionsPendingError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "pending": e.pending},
        ) from e
    except InvalidDecisionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return CloseResponse(
        envelope_id=summary.envelope_id,
        kept=summary.kept,
        discarded=summary.discarded,
        failed=summary.failed,
    )


@router.get("/diagnostics", response_model=DiagnosticsResponse)
async def diagnostics(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> DiagnosticsResponse:
    stats = container.tracker.stats()
    return DiagnosticsResponse(
        total_errors=stats.total_errors,
        total_success=stats.total_success,
        avg_load_time_ms=stats.avg_load_time_ms,
        errors_by_category=stats.errors_by_category,
        recent_errors=stats.recent_errors,
        success_rate=stats.success_rate,
    )


@router.delete("/diagnostics", response_model=DiagnosticsResponse)
async def clear_diagnostics(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> DiagnosticsResponse:
    """Forget every recorded load attempt."""
    container.tracker.clear()
    return await diagnostics(container)
