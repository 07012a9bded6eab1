from holoalbum.api.album import router as album_router
from holoalbum.api.envelopes import router as envelopes_router
from holoalbum.api.health import router as health_router
from holoalbum.api.session import router as session_router

__all__ = [
    "album_router",
    "envelopes_router",
    "health_router",
    "session_router",
]
