import os

from pydantic import BaseModel, Field


class Settings(BaseModel):
    # --- Zone Offsets ---
    default_zone_offset: int = 18  # deg F, applied to top/middle/bottom on a fresh install

    # --- Hardware Rated Life (firings) ---
    default_max_life: dict[str, int] = Field(
        default_factory=lambda: {
            "elements": 300,
            "thermocouples": 1000,
            "relays": 500,
        }
    )

    # --- API ---
    history_page_size: int = 20

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./kilnlog.db")
    db_echo: bool = False

settings = Settings()
