"""
Ledger settings loaded from the environment and an optional ``.env`` file.

Storage knobs live under ``STORAGE_*``, server knobs under ``API_*``.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger database lives and how connections to it behave."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Field(default=Path("data"), description="Directory holding the database")
    db_name: str = Field(default="loans.db", description="Database file name")

    pool_size: int = Field(default=5, ge=1, description="Pooled SQLite connections")
    busy_timeout: int = Field(
        default=30000, ge=0, description="Milliseconds a writer waits for the lock"
    )
    acquire_timeout: float | None = Field(
        default=30.0, description="Seconds to wait for a pooled connection; unset waits forever"
    )

    @field_validator("acquire_timeout")
    @classmethod
    def positive_acquire_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("acquire_timeout must be positive")
        return v

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """HTTP server options."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = False  # also exposes /docs and /redoc
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class Settings(BaseSettings):
    """Top-level settings for the loan ledger service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Material Loan Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool | None = None  # None: JSON everywhere except development

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def create_data_dir(self) -> "Settings":
        self.storage.data_dir.mkdir(parents=True, exist_ok=True)
        return self

    @property
    def json_logs(self) -> bool:
        if self.log_json is not None:
            return self.log_json
        return self.environment != "development"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call reloads them."""
    global _settings
    _settings = None
