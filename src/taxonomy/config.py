"""Environment-driven settings for the taxonomy service.

Storage providers live in ``domain.toml`` and are selected with
``PROTEAN_ENV``; these settings cover the hierarchy rules, the HTTP surface
and logging.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ``TAXONOMY_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="TAXONOMY_", env_file=".env", case_sensitive=False)

    # Hierarchy
    max_depth: int = 32
    slug_fallback: str = "category"

    # API
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str | None = None
    log_dir: str = "logs"

    @field_validator("max_depth")
    @classmethod
    def check_max_depth(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_depth must allow at least one level")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str | None) -> str | None:
        if v is None:
            return None
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level '{v}'")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
