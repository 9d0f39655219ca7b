"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SHEET_URL = (
    "https://docs.google.com/spreadsheets/d/1PBN_HQOi5ZpKDd63mouxttFvvCwtmY97Tb5if5_cdBA"
    "/gviz/tq?tqx=out:csv&sheet={sheet}"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Feeds (spreadsheet CSV exports)
    clients_feed_url: str = SHEET_URL.format(sheet="clientes")
    accounts_feed_url: str = SHEET_URL.format(sheet="contas")
    agencies_feed_url: str = SHEET_URL.format(sheet="agencias")
    feed_timeout_seconds: float = 30.0
    feed_max_workers: int = 3
    feed_cache_ttl_seconds: int = 0  # 0 disables the transient feed cache

    # Listing
    page_size: int = Field(default=10, ge=1)
    session_ttl_minutes: int = 120
    session_cookie_name: str = "banestes_session"

    # Maps embed
    maps_api_key: str = ""
    maps_embed_url: str = "https://www.google.com/maps/embed/v1/place"
    maps_verify: bool = False  # Check the provider script before building embeds

    # API
    cors_allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    @field_validator("cors_allowed_origins")
    @classmethod
    def parse_origin_list(cls, v: str) -> list[str]:
        """Parse comma-separated origin list."""
        if not v:
            return []
        return [origin.strip() for origin in v.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def feed_urls(self) -> dict[str, str]:
        """Feed name to URL mapping."""
        return {
            "clients": self.clients_feed_url,
            "accounts": self.accounts_feed_url,
            "agencies": self.agencies_feed_url,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
