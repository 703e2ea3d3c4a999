"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockroom.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class ConsumptionSettings(BaseSettings):
    """BOM consumption configuration."""

    model_config = SettingsConfigDict(env_prefix="CONSUMPTION_")

    # "skip": short lines are skipped and reported, the rest is applied.
    # "strict": any short line rejects the whole consumption.
    policy: Literal["skip", "strict"] = "skip"

    # Multiply BOM quantities by the work order quantity.
    scale_by_quantity: bool = True

    reason: str = "work-order consumption"


class WorkOrderSettings(BaseSettings):
    """Work order lifecycle configuration."""

    model_config = SettingsConfigDict(env_prefix="WORK_ORDER_")

    default_quantity: float = Field(default=1.0, gt=0)
    order_number_prefix: str = "WO"
    duration_rounding: Literal["round", "truncate"] = "round"


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Header carrying the caller identity set by the upstream auth proxy
    user_header: str = "X-User-Id"
    default_performer: str = "system"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockroom"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    consumption: ConsumptionSettings = Field(default_factory=ConsumptionSettings)
    work_order: WorkOrderSettings = Field(default_factory=WorkOrderSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
