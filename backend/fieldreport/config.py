"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - storage_quota_bytes == 0 disables the capacity check
    - key_scheme selects the physical-key layout for every ScopedStore built by the app

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for every setting: a local SQLite file works out-of-the-box
    - 5 MiB default quota mirrors the browser storage area the data set was sized for
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from fieldreport.core.domain_types import KeyScheme


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite:///./fieldreport.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Heroku-style postgres:// is not accepted by SQLAlchemy 2.x."""
        if isinstance(v, str) and v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    # Storage
    storage_quota_bytes: int = 5 * 1024 * 1024
    key_scheme: KeyScheme = KeyScheme.PLAIN
    current_project_key: str = "currentProjectId"

    # Backup
    backup_app_name: str = "Drillers Report"
    backup_version: str = "1.0"

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
