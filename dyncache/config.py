"""Cache configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for caches built by ``create_cache_from_settings``."""

    mem_len: int = 128
    backend: str = "locked"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DYNCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings so env parsing only happens once."""

    return Settings()
