# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads all settings from environment variables and .env file.

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # AI / Gemini
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    ai_temperature: float = 1.0
    ai_top_p: float = 0.95
    ai_max_output_tokens: int = 16384

    # Processing pipeline
    processing_timeout_seconds: float = 120.0
    image_max_edge: int = 1200
    image_jpeg_quality: int = 85
    max_supporting_references: int = 5

    # Defaults applied to a user without saved study preferences
    default_study_duration: int = 5
    default_study_length: str = "15 mins"
    default_supporting_references: int = 2
    default_user_id: str = "local-user"

    # Storage
    storage_backend: str = "local"  # "local" or "database"
    data_dir: Path = Path("data")

    # Database (only required when storage_backend == "database")
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "sermonscribe"
    db_user: str = "sermonscribe"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Calendar export
    app_base_url: str = "http://localhost:8000"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    GEMINI_API_KEY is optional at load time - it is checked on the first model call.
    """
    return Settings()
