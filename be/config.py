"""Central configuration for the Catalyst pitch service.

This module uses Pydantic Settings for validation and env management.
"""
from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class DatabaseSettings(BaseSettings):
    """Database configuration."""
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./catalyst.db",
        description="Async database connection URL",
    )
    echo: bool = Field(default=False)


class LLMSettings(BaseSettings):
    """Text-generation service configuration."""
    model_config = SettingsConfigDict(env_prefix="LLM_", extra="ignore")

    enabled: bool = Field(default=True, description="When false, AI operations use fallbacks only")
    api_key: str | None = Field(default=None, validate_default=True, description="Falls back to OPENAI_API_KEY")
    base_url: str | None = Field(default=None, description="OpenAI-compatible gateway URL")
    model: str = Field(default="gpt-4")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    quote_max_tokens: int = Field(default=200, ge=16, le=2000)

    @field_validator("api_key", mode="after")
    @classmethod
    def default_api_key(cls, v: str | None) -> str | None:
        return v or os.getenv("OPENAI_API_KEY") or None


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = Field(default="INFO")
    format: Literal["json", "text"] = Field(default="json")
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)
    app_name: str = Field(default="Catalyst")
    version: str = Field(default="0.1.0")
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Sub-configs
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
