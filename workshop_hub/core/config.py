"""Application configuration using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WSH_",
        extra="ignore",
    )

    environment: Literal["local", "test", "staging", "production"] = Field(default="local")
    service_name: str = Field(default="workshop-hub")
    database_url: str = Field(default="sqlite:///./data/workshops.db")
    sql_echo: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)
    cors_origins: List[str] | str = Field(default_factory=list)
    lifecycle_enabled: bool = Field(default=True)
    lifecycle_interval_seconds: float = Field(default=30.0, gt=0)
    seed_demo_data: bool = Field(default=True)
    event_source: str = Field(default="workshop_hub")
    event_publish_attempts: int = Field(default=2, ge=1)
    event_topic_arn: str | None = Field(default=None)
    redis_url: str | None = Field(default=None)
    redis_token: str | None = Field(default=None)
    redis_analytics_prefix: str = Field(default="wsh")
    broadcast_queue_size: int = Field(default=100, ge=1)
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str | List[str] | None) -> List[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("event_topic_arn", "redis_url", "redis_token", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: str | None) -> str | None:
        if value == "":
            return None
        return value


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings instance."""

    return AppSettings()
