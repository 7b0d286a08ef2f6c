"""
Settings for skyfare, loaded from SKYFARE_* environment variables or a .env file.

    $ export SKYFARE_VIETJET_BASE_URL=https://vj.example/api
    $ export SKYFARE_ENABLED_SOURCES=VJ,VNA
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from skyfare.search.models import Airline


class Settings(BaseSettings):
    """Application settings."""

    vietjet_base_url: str = Field(default="https://api.vietjetair.com/flights")
    vietjet_api_key: Optional[str] = None
    vna_base_url: str = Field(default="https://api.vietnamairlines.com/flights")
    vna_api_key: Optional[str] = None

    request_timeout: float = Field(default=30.0, description="HTTP timeout per source call, seconds")
    log_level: str = "INFO"
    search_log_path: str = "search_log.jsonl"
    enabled_sources: Annotated[List[Airline], NoDecode] = Field(
        default_factory=lambda: [Airline.VJ, Airline.VNA]
    )

    model_config = SettingsConfigDict(
        env_prefix="SKYFARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("request_timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("SKYFARE_REQUEST_TIMEOUT must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("enabled_sources", mode="before")
    @classmethod
    def _split_sources(cls, v):
        if isinstance(v, str):
            return [s.strip().upper() for s in v.split(",") if s.strip()]
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return settings loaded from the environment."""
    return Settings()


__all__ = ["Settings", "get_settings"]
