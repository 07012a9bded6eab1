"""
Error taxonomy.

Catalog errors describe why a single remote fetch failed. They are always
caught by the card loader and turned into per-item state; they never abort
an envelope opening.

Session errors describe a command that the session state machine refused
(opening while busy, closing with undecided cards, ...).
"""

from enum import Enum


class HoloAlbumError(Exception):
    """Base class for all holoalbum errors."""

    pass


# =============================================================================
# CATALOG ERRORS
# =============================================================================


class CatalogErrorKind(str, Enum):
    """Classification of catalog fetch failures."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    UPSTREAM = "upstream"
    SHAPE = "shape"


class CatalogError(HoloAlbumError):
    """A catalog fetch did not produce a usable entity."""

    kind: CatalogErrorKind = CatalogErrorKind.NETWORK

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CatalogNetworkError(CatalogError):
    """The request could not be completed."""

    kind = CatalogErrorKind.NETWORK


class CatalogTimeoutError(CatalogError):
    """The request exceeded the fixed deadline and was cancelled."""

    kind = CatalogErrorKind.TIMEOUT


class UpstreamError(CatalogError):
    """The catalog answered with a non-success status."""

    kind = CatalogErrorKind.UPSTREAM

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShapeError(CatalogError):
    """The catalog answered with an unexpected payload."""

    kind = CatalogErrorKind.SHAPE


# =============================================================================
# IDENTIFIER ERRORS
# =============================================================================


class InvalidIdentifierError(HoloAlbumError):
    """A card id is outside its category's valid set."""

    def __init__(self, category: str, card_id: int) -> None:
        super().__init__(f"Id {card_id} is not a valid {category} id")
        self.category = category
        self.card_id = card_id


# =============================================================================
# SESSION ERRORS
# =============================================================================


class SessionError(HoloAlbumError):
    """A session command was refused."""

    pass


class UnknownEnvelopeError(SessionError):
    """No envelope slot with the given id exists."""

    pass


class SessionBusyError(SessionError):
    """Another envelope is already open."""

    pass


class EnvelopeUnavailableError(SessionError):
    """The envelope is still recharging."""

    def __init__(self, envelope_id: str, remaining_ms: int) -> None:
        super().__init__(f"Envelope {envelope_id} is recharging ({remaining_ms} ms left)")
        self.envelope_id = envelope_id
        self.remaining_ms = remaining_ms


class DecisionsPendingError(SessionError):
    """Some loaded cards have not been kept or discarded yet."""

    def __init__(self, pending: list[int]) -> None:
        super().__init__(f"Cards awaiting a decision: {pending}")
        self.pending = pending


class InvalidDecisionError(SessionError):
    """A decision was made for a card that cannot receive one."""

    pass
