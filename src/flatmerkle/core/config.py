"""
Flatmerkle - Configuration
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    # Logging
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Hashing
    HASH_ALGORITHM: str = "sha256"
    HASH_SIZE: Optional[int] = Field(default=None, ge=1, le=64)

    # Trees
    MAX_TREE_WIDTH: int = Field(default=2**20, ge=1)

    # Metrics
    METRICS_ENABLED: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
