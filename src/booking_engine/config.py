"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Booking engine settings, read from BOOKING_ENGINE_* variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BOOKING_ENGINE_",
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    # Storage
    storage: Literal["memory", "json"] = "memory"
    data_dir: Path = Path("./data")

    # Events
    event_sink: Literal["memory", "log", "null"] = "memory"

    # Business defaults
    default_payment_method: str = "UNDEFINED"
    off_season_label: str = "Off season"
    cancelled_reservations_block_room: bool = True

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("default_payment_method")
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Default payment method must not be empty")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
