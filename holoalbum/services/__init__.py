"""
Services layer for holoalbum.

Contains the envelope-opening pipeline and the persistent state it updates.
"""

from holoalbum.services.album_store import AlbumStore
from holoalbum.services.card_loader import CardLoader, LoadItem, LoadStatus, build_card
from holoalbum.services.catalog_gateway import CatalogGateway
from holoalbum.services.cooldown import CooldownManager, format_remaining
from holoalbum.services.identifier_pool import IdentifierPool
from holoalbum.services.images import image_url
from holoalbum.services.load_tracker import LoadStats, LoadTracker
from holoalbum.services.pack_composer import PACK_RECIPES, PackComposer, PackRecipe
from holoalbum.services.session import (
    Decision,
    EnvelopeStatus,
    SessionController,
    SessionState,
    SessionSummary,
)

__all__ = [
    "AlbumStore",
    "CardLoader",
    "CatalogGateway",
    "CooldownManager",
    "Decision",
    "EnvelopeStatus",
    "IdentifierPool",
    "LoadItem",
    "LoadStats",
    "LoadStatus",
    "LoadTracker",
    "PACK_RECIPES",
    "PackComposer",
    "PackRecipe",
    "SessionController",
    "SessionState",
    "SessionSummary",
    "build_card",
    "format_remaining",
    "image_url",
]
