"""Configuration settings for KrishiLink."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """KrishiLink settings from environment."""

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "krishilink"
    server_selection_timeout_ms: int = 5000

    # Collections
    crops_collection: str = "crops"
    users_collection: str = "users"

    # Marketplace settings
    latest_listings_limit: int = 6

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = ["*"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
