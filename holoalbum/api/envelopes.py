"""
Envelope API endpoints.

Lists the envelope bank and opens envelopes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from holoalbum.api.deps import ServiceContainer, get_container
from holoalbum.api.schemas import SessionResponse, session_to_response
from holoalbum.models.errors import (
    EnvelopeUnavailableError,
    SessionBusyError,
    UnknownEnvelopeError,
)

router = APIRouter(prefix="/envelopes", tags=["envelopes"])


class EnvelopeResponse(BaseModel):
    """Availability of one envelope."""

    envelope_id: str
    available: bool
    remaining_ms: int
    remaining_label: str


class EnvelopeListResponse(BaseModel):
    envelopes: list[EnvelopeResponse]
    busy: bool


@router.get("", response_model=EnvelopeListResponse)
async def list_envelopes(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> EnvelopeListResponse:
    """Availability and remaining recharge time of every envelope."""
    session = container.session
    return EnvelopeListResponse(
        envelopes=[
            EnvelopeResponse(
                envelope_id=e.envelope_id,
                available=e.available,
                remaining_ms=e.remaining_ms,
                remaining_label=e.remaining_label,
            )
            for e in session.envelopes()
        ],
        busy=session.envelope_id is not None,
    )


@router.post("/{envelope_id}/open", response_model=SessionResponse)
async def open_envelope(
    envelope_id: str,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> SessionResponse:
    """
    Open an envelope.

    Recharges the whole bank and returns the drawn cards once every fetch
    has settled. Failed cards are reported per item and can be retried.
    """
    try:
        await container.session.open(envelope_id)
    except UnknownEnvelopeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except (SessionBusyError, EnvelopeUnavailableError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e

    return session_to_response(container.session)
