"""
Response models shared by the API routers.
"""

from typing import Any

from pydantic import BaseModel, Field

from holoalbum.models.card import Card
from holoalbum.services.card_loader import LoadItem
from holoalbum.services.session import SessionController


class CardResponse(BaseModel):
    """A materialized card."""

    category: str
    id: int
    name: str
    rarity: str
    image: str
    data: dict[str, Any] = Field(default_factory=dict)


class SessionItemResponse(BaseModel):
    """One drawn card and its load state."""

    index: int
    category: str
    id: int
    status: str
    card: CardResponse | None = None
    error: str | None = None
    error_kind: str | None = None
    attempts: int = 0
    decision: str | None = None
    in_album: bool = False


class SessionResponse(BaseModel):
    """Current envelope session."""

    state: str
    envelope_id: str | None = None
    items: list[SessionItemResponse] = Field(default_factory=list)
    pending_decisions: list[int] = Field(default_factory=list)
    processed: int = 0
    can_close: bool = False


def card_to_response(card: Card) -> CardResponse:
    raw = card.to_dict()
    return CardResponse(
        category=raw["category"],
        id=raw["id"],
        name=raw["name"],
        rarity=raw["rarity"],
        image=raw["image"],
        data=raw["data"],
    )


def _item_to_response(
    index: int, item: LoadItem, session: SessionController
) -> SessionItemResponse:
    decision = session.decisions.get(index)
    return SessionItemResponse(
        index=index,
        category=item.card_id.category.value,
        id=item.card_id.id,
        status=item.status.value,
        card=card_to_response(item.card) if item.card else None,
        error=item.error,
        error_kind=item.error_kind.value if item.error_kind else None,
        attempts=item.attempts,
        decision=decision.value if decision else None,
        in_album=session.album.has_card(item.card) if item.card else False,
    )


def session_to_response(session: SessionController) -> SessionResponse:
    return SessionResponse(
        state=session.state.value,
        envelope_id=session.envelope_id,
        items=[_item_to_response(i, item, session) for i, item in enumerate(session.items)],
        pending_decisions=session.pending_decisions,
        processed=session.processed_count,
        can_close=session.can_close,
    )
