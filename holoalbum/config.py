from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "holoalbum"
    debug: bool = False

    # Where album and cooldown blobs are kept
    storage_backend: Literal["sql", "file", "memory"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./holoalbum.db"
    storage_dir: Path = Path(".holoalbum")

    catalog_base_url: str = "https://swapi.dev/api"
    catalog_timeout_ms: int = 5000

    cooldown_ms: int = 60_000
    purge_interval_seconds: float = 60.0


settings = Settings()


# =============================================================================
# ENVELOPE BANK
# =============================================================================

# Independent pack-opening channels. Opening any one recharges all of them.
ENVELOPE_IDS: tuple[str, ...] = ("1", "2", "3", "4")

# =============================================================================
# STORAGE KEYS
# =============================================================================

ALBUM_STORAGE_KEY = "starwars-album"
COOLDOWN_STORAGE_KEY = "starwars-envelopes-cooldown"
