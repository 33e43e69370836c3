"""
Runtime configuration helpers for the Framez client.

Loads the Supabase project URL, anon key and storage settings from the
environment, falling back to the .env file located in the project root.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve the project root
BASE_DIR = Path(__file__).resolve().parents[1]

# Absolute path to .env
ENV_PATH = BASE_DIR / ".env"

# Load .env defaults without overriding environment variables provided by the platform
load_dotenv(dotenv_path=ENV_PATH, override=False)


class Settings(BaseSettings):
    # Required: must come from the environment or .env
    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_anon_key: str = Field(..., alias="SUPABASE_ANON_KEY")

    # Optional fields
    storage_bucket: str = Field(default="posts", alias="FRAMEZ_STORAGE_BUCKET")
    realtime_schema: str = Field(default="public", alias="FRAMEZ_REALTIME_SCHEMA")
    image_fetch_timeout: float = Field(default=30.0, alias="FRAMEZ_IMAGE_FETCH_TIMEOUT")
    log_level: str = Field(default="INFO", alias="FRAMEZ_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
