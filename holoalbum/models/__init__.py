from holoalbum.models.album import Album, AlbumStats, CategoryStats, slot_index
from holoalbum.models.card import Card, CardId, Rarity, rarity_for
from holoalbum.models.catalog import (
    CATEGORY_TOTALS,
    PAYLOAD_MODELS,
    RESOURCE_NAMES,
    VALID_IDS,
    CatalogEntity,
    Category,
    Film,
    Person,
    Starship,
    extract_id_from_url,
    is_valid_id,
)
from holoalbum.models.errors import (
    CatalogError,
    CatalogErrorKind,
    CatalogNetworkError,
    CatalogTimeoutError,
    DecisionsPendingError,
    EnvelopeUnavailableError,
    HoloAlbumError,
    InvalidDecisionError,
    InvalidIdentifierError,
    SessionBusyError,
    SessionError,
    ShapeError,
    UnknownEnvelopeError,
    UpstreamError,
)

__all__ = [
    "Album",
    "AlbumStats",
    "CATEGORY_TOTALS",
    "Card",
    "CardId",
    "CatalogEntity",
    "CatalogError",
    "CatalogErrorKind",
    "CatalogNetworkError",
    "CatalogTimeoutError",
    "Category",
    "CategoryStats",
    "DecisionsPendingError",
    "EnvelopeUnavailableError",
    "Film",
    "HoloAlbumError",
    "InvalidDecisionError",
    "InvalidIdentifierError",
    "PAYLOAD_MODELS",
    "Person",
    "RESOURCE_NAMES",
    "Rarity",
    "SessionBusyError",
    "SessionError",
    "ShapeError",
    "Starship",
    "UnknownEnvelopeError",
    "UpstreamError",
    "VALID_IDS",
    "extract_id_from_url",
    "is_valid_id",
    "rarity_for",
    "slot_index",
]
