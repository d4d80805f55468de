"""
Interior Tracker - Application Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Interior Tracker"
    debug: bool = False

    # Which provider set backs records, blobs and sessions: "local" or "supabase"
    backend: str = "local"

    # Hosted backend (Supabase)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    http_timeout: float = 30.0

    # Blob storage
    storage_bucket: str = "interior-images"
    storage_path: str = "./storage"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB

    # Local provider database (SQLite for development)
    database_url: str = "sqlite+aiosqlite:///./storage/interior_tracker.db"

    # Local provider sessions
    jwt_secret_key: str = "interior-tracker-secret-key-change-in-production"
    jwt_expire_minutes: int = 480  # 8 hours

    # Signs the browser cookie session (current session + pending toasts)
    session_secret_key: str = "interior-tracker-session-key-change-in-production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
