"""Application settings loaded from the environment (and an optional .env file)."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Store settings.

    ``environment`` plays the role of the overlay selector: ``test`` quiets
    logging, ``production``/``staging`` switch log rendering to JSON.
    """

    app_name: str = Field(default="makhana-store", description="Application name")
    environment: str = Field(default="development", description="development/test/staging/production")

    # Database
    database_url: str = Field(default="sqlite:///./makhana.db", description="Database URL shared by every domain")

    # Logging
    log_level: str | None = Field(default=None, description="Overrides the environment default")
    log_dir: str = Field(default="logs", description="Directory for rotating log files")

    # HTTP
    allowed_origins: str = Field(default="*", description="CORS allowed origins (comma-separated)")

    # Ordering
    currency: str = Field(default="INR", max_length=3)
    order_conflict_retries: int = Field(default=1, ge=0, description="Retries after a placement conflict")
    seed_catalogue: bool = Field(default=True, description="Seed default products on an empty catalogue")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str | None:
        if v is None:
            return v
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    def get_allowed_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "staging")


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
