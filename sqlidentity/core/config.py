"""Store configuration via Pydantic BaseSettings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_log = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SQLIDENTITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./identity.db",
        description="Async SQLAlchemy connection URL holding the identity tables",
    )
    echo_sql: bool = Field(default=False, description="Log every emitted SQL statement")

    # Application
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )

    @computed_field
    @property
    def is_sqlite(self) -> bool:
        """True when the configured backend is SQLite (needs savepoint hooks)."""
        return self.database_url.startswith("sqlite")

    @model_validator(mode="after")
    def _warn_sync_driver(self) -> "Settings":
        """Emit a warning when the URL names a driver without async support."""
        scheme = self.database_url.split("://", 1)[0]
        if "+" not in scheme:
            _log.warning(
                "Database URL '%s' has no async driver — stores require AsyncSession",
                scheme,
            )
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
