"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Confirmable Records"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "confirmable"

    # Database
    database_url: str = "sqlite:///./confirmable.db"

    # Confirmations
    fallback_confirmer_id: int = 1  # Used when no current user can be resolved
    current_user_header: str = "X-User-Id"


settings = Settings()
