"""Application configuration for the room control API."""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=7881)

    livekit_api_key: str = Field(default="")
    livekit_api_secret: str = Field(default="")
    livekit_url: str = Field(default="http://localhost:7880")

    azure_account_name: str = Field(default="")
    azure_account_key: str = Field(default="")
    azure_container_name: str = Field(default="")

    recording_path_prefix: str = Field(default="recordings")

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        """Allow comma-separated env values for CORS origins."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def missing_livekit_credentials(self) -> list[str]:
        """Names of the LiveKit credential settings that are unset."""

        return _blank_fields(self, "livekit_api_key", "livekit_api_secret")

    def missing_storage_credentials(self) -> list[str]:
        """Names of the Azure blob storage settings that are unset."""

        return _blank_fields(self, "azure_account_name", "azure_account_key", "azure_container_name")


def _blank_fields(settings: Settings, *names: str) -> list[str]:
    return [name for name in names if not str(getattr(settings, name) or "").strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
