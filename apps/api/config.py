"""
ChefOS API settings, read from the environment (and .env when present).
"""
import os
from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    API_TITLE: str = "ChefOS API"
    API_VERSION: str = "0.1.0"

    # Comma-separated
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://localhost:8080"

    LOG_LEVEL: str = "INFO"

    # Empty means db/session.py falls back to local Postgres
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Minimum similarity for fuzzy ingredient matches
    MATCH_THRESHOLD: float = 0.4

    # Recipe lines whose unit can't convert to the pricing unit:
    # "error" leaves them unpriced, "direct" multiplies as-is and flags them
    UNIT_MISMATCH_POLICY: Literal["error", "direct"] = "error"

    # "Today" for duty rosters is taken in this timezone
    KITCHEN_TIMEZONE: str = "UTC"
    AM_REMINDER_CUTOFF_HOUR: int = 14
    PM_REMINDER_START_HOUR: int = 16

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()
