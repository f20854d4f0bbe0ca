"""Settings for the LawMasters dashboard client, read with pydantic-settings.

Every field can be set through an ``LM_``-prefixed environment variable or a
``.env`` file in the working directory:

    LM_STORAGE_BACKEND=sqlite
    LM_STORAGE_PATH=/var/lib/lawmasters
    LM_API_BASE_URL=https://dashboard.example.in
    LM_LOG_FORMAT=json
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_KEY = "lawmasters-app-store"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageBackend(str, Enum):
    """Where persisted preferences live between runs."""

    MEMORY = "memory"
    JSON = "json"
    SQLITE = "sqlite"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LawMasters"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # Persisted preferences
    storage_backend: StorageBackend = StorageBackend.JSON
    storage_path: Path = Field(
        default=Path.home() / ".lawmasters",
        description="Directory holding the JSON payload or the sqlite database",
    )
    storage_key: str = Field(default=DEFAULT_STORAGE_KEY, min_length=1)

    # Dashboard backend
    api_base_url: str = "http://localhost:5000"
    api_timeout: float = Field(default=30.0, gt=0, description="Seconds")

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = "console"
    log_file: Path | None = None

    @field_validator("storage_path", "log_file", mode="after")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None

    @field_validator("api_base_url")
    @classmethod
    def normalize_base_url(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return v

    @field_validator("log_format", mode="before")
    @classmethod
    def json_logs_in_production(cls, v: str | None, info) -> str:
        if v is None and info.data.get("environment") == Environment.PRODUCTION:
            return "json"
        return v or "console"

    @property
    def sqlite_path(self) -> Path:
        return self.storage_path / "preferences.db"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process; call get_settings.cache_clear() to reload."""
    return Settings()
