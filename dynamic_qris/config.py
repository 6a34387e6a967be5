"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_KEY = "dev-secret-key"


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Root logger level")
    json_logs: bool = Field(default=True, description="Enable JSON formatted logs")


class Settings(BaseSettings):
    """Central application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="dynamic-qris")
    environment: Literal["development", "staging", "production"] = Field(default="development")
    api_key: str = Field(default=DEFAULT_API_KEY)
    invoice_prefix: str = Field(
        default="INV",
        max_length=16,
        description="Prefix of auto-generated invoice ids",
        validation_alias=AliasChoices("QRIS_INVOICE_PREFIX", "INVOICE_PREFIX"),
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return memoized application settings."""

    return Settings()


settings = get_settings()
