"""
Configuration module for NoteFlow.
Loads environment variables and provides centralized config access.
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

# ============================================================
# Centralized Data Paths
# ============================================================
# All user data lives under <project>/data/ for easy backup/deletion.
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# Default SQLite database file
SQLITE_DB_PATH = DATA_DIR / "noteflow.db"

DEFAULT_JWT_SECRET = "your-super-secret-key-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses pydantic-settings for validation and type coercion.
    """

    # ============================================================
    # JWT Authentication
    # ============================================================
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 720  # 30 days

    # ============================================================
    # Storage
    # ============================================================
    # If unset, the database lives at data/noteflow.db
    database_path: Optional[str] = None

    # ============================================================
    # Editor autosave
    # ============================================================
    # Quiet period after the last edit before a note is saved
    autosave_delay_seconds: float = 1.5
    # Quiet period for the scratch pad
    scratch_pad_delay_seconds: float = 1.0

    # ============================================================
    # Server Configuration
    # ============================================================
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # ============================================================
    # CORS Configuration
    # ============================================================
    # Comma-separated origins
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ============================================================
    # Rate limiting on auth endpoints
    # ============================================================
    rate_limit_enabled: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse the comma-separated CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def sqlite_path(self) -> Path:
        """Resolved path of the SQLite database file."""
        if self.database_path:
            return Path(self.database_path)
        return SQLITE_DB_PATH


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reloading env vars on every call.
    """
    return Settings()
