"""Runtime configuration, read from ``SLUGMAP_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SLUGMAP_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Root logging level"
    )
    max_upload_bytes: int = Field(10 * 1024 * 1024, ge=1, description="Largest accepted upload")
    preview_limit: int = Field(20, ge=0, description="Slugs shown in the sitemap preview")
    slug_export_filename: str = Field("sitemap-slugs.csv")
    redirect_export_filename: str = Field("formatted-redirects.csv")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
