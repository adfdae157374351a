"""Runtime settings for archshift, read from the environment."""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.constants import DEFAULT_TICK_INTERVAL

DEFAULT_DATABASE_URL = "sqlite:///data/archshift.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


class Settings(BaseModel):
    database_url: str = Field(DEFAULT_DATABASE_URL, description="SQLAlchemy database URL")
    session_secret_key: str = Field(
        "archshift-dev-secret-change-me", description="Signs the session cookie"
    )
    cors_origins: List[str] = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))
    simulation_interval_seconds: float = Field(DEFAULT_TICK_INTERVAL, gt=0)
    simulation_seed: Optional[int] = Field(None, description="Seed for reproducible simulations")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        seed = os.getenv("SIMULATION_SEED")
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            session_secret_key=os.getenv("SESSION_SECRET_KEY", "archshift-dev-secret-change-me"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            simulation_interval_seconds=float(
                os.getenv("SIMULATION_INTERVAL_SECONDS", DEFAULT_TICK_INTERVAL)
            ),
            simulation_seed=int(seed) if seed else None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return Settings.from_env()
