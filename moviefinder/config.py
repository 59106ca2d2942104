"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TmdbSettings(BaseModel):
    api_token: SecretStr | None = Field(
        default=None,
        description="TMDB v4 read access token sent as a Bearer header.",
    )
    base_url: str = "https://api.themoviedb.org/3"
    image_base_url: str = "https://image.tmdb.org/t/p/w500"
    request_timeout_seconds: int = Field(default=10, ge=1, le=60)

    @field_validator("base_url", "image_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SearchSettings(BaseModel):
    debounce_seconds: float = Field(default=1.0, gt=0, le=10)
    max_results: int = Field(default=10, ge=1, le=20)
    idle_ttl_seconds: float = Field(default=3600, gt=0)
    sweep_interval_seconds: float = Field(default=300, gt=0)


class RequestLimitSettings(BaseModel):
    max_requests: int = Field(default=30, ge=0)
    interval_seconds: int = Field(default=10, ge=1)


class BotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    telegram_token: SecretStr
    telegram_proxy: str | None = None
    admin_telegram_id: int | None = None

    tmdb: TmdbSettings = Field(default_factory=TmdbSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    request_limit: RequestLimitSettings = Field(default_factory=RequestLimitSettings)


@lru_cache
def get_settings() -> BotSettings:
    """Return cached settings instance."""

    return BotSettings()  # type: ignore[call-arg]


__all__ = [
    "BotSettings",
    "RequestLimitSettings",
    "SearchSettings",
    "TmdbSettings",
    "get_settings",
]
