"""Configuration handling for the Business Bites backend."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ROW_SOURCE_NAMES = ("supabase", "static", "sqlite")


class Settings(BaseSettings):
    """Application configuration sourced from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Supabase (PostgREST) configuration
    supabase_url: AnyHttpUrl | None = Field(default=None, validation_alias="SUPABASE_URL")
    supabase_key: str | None = Field(default=None, validation_alias="SUPABASE_KEY")
    supabase_table: str = Field(
        default="business_bites_display", validation_alias="SUPABASE_TABLE"
    )
    supabase_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="SUPABASE_TIMEOUT_SECONDS",
        ge=1.0,
        le=120.0,
        description="Timeout in seconds for Supabase REST requests.",
    )

    # Local storage
    static_data_path: str = Field(
        default="db/business_bites_display.json", validation_alias="STATIC_DATA_PATH"
    )
    sqlite_path: str = Field(default="data/business_bites.db", validation_alias="SQLITE_PATH")
    row_sources: str = Field(
        default="supabase,static,sqlite",
        validation_alias="ROW_SOURCES",
        description="Comma separated backends tried in order when reading articles.",
    )

    # Application behaviour
    default_market: str = Field(default="US", validation_alias="DEFAULT_MARKET")
    image_proxy_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="IMAGE_PROXY_TIMEOUT_SECONDS",
        ge=1.0,
        le=60.0,
    )
    image_proxy_max_bytes: int = Field(
        default=5 * 1024 * 1024,
        validation_alias="IMAGE_PROXY_MAX_BYTES",
        ge=1024,
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("row_sources")
    @classmethod
    def _check_row_sources(cls, value: str) -> str:
        unknown = [name for name in _split(value) if name not in ROW_SOURCE_NAMES]
        if unknown:
            raise ValueError(f"Unknown row sources: {', '.join(unknown)}")
        if not _split(value):
            raise ValueError("At least one row source must be configured")
        return value

    def row_sources_list(self) -> list[str]:
        return _split(self.row_sources)

    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def _split(raw: str) -> list[str]:
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["ROW_SOURCE_NAMES", "Settings", "get_settings"]
