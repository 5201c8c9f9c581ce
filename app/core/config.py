"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "LightChurch"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./lightchurch.db"

    # Public API client (used by the interest toggle controller)
    api_base_url: str = "http://localhost:8000"
    request_timeout_seconds: float = 10.0
    interest_storage_path: str = "~/.lightchurch/storage.json"

    # Background jobs
    reconcile_interval_minutes: int = 15


settings = Settings()
