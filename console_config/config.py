"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Persistence
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = Field(default="redis://localhost:6379/0")
    storage_namespace: str = "console"

    # Platform identity used for built-in Global defaults and backup metadata
    platform_name: str = "EVA DA 2.0"
    platform_base_url: str = "http://localhost:8000"

    # Configuration engine
    run_migration_on_startup: bool = True
    backup_keep_count: int = Field(default=10, ge=1)
    health_issue_budget_per_record: int = Field(default=10, ge=1)
    export_dir: Path = Path("exports")

    # Observability
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("storage_namespace")
    @classmethod
    def strip_namespace_separator(cls, v: str) -> str:
        """Namespace is joined with ':' by the Redis adapter."""
        return v.rstrip(":")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
