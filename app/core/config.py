"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (Elasticsearch, Redis, tile provider)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Elasticsearch
    ELASTICSEARCH_URL: str = Field(
        default="http://localhost:9200",
        description="Elasticsearch node URL"
    )
    ELASTICSEARCH_INDEX: str = Field(
        default="users",
        description="Index holding user documents"
    )
    ELASTICSEARCH_TIMEOUT: int = Field(
        default=10,
        description="Elasticsearch request timeout in seconds"
    )

    # Redis tile cache
    REDIS_URL: str = Field(
        default="redis://localhost:6379/1",
        description="Redis connection URL for the map tile cache"
    )
    CACHE_TTL_SECONDS: int = Field(
        default=7 * 24 * 3600,
        description="Requested tile TTL in seconds (never below 7 days)"
    )

    # OpenStreetMap tile provider
    OSM_BASE_URL: str = Field(
        default="https://tile.openstreetmap.org",
        description="Tile server base URL"
    )
    OSM_TIMEOUT: int = Field(
        default=10,
        description="Tile server request timeout in seconds"
    )
    OSM_USER_AGENT: str = Field(
        default="UserService/1.0",
        description="User-Agent sent to the tile server (required by its usage policy)"
    )
    MAP_ZOOM_LEVEL: int = Field(
        default=13,
        description="Zoom level used for user maps when none is requested"
    )

    # Search pagination
    DEFAULT_PAGE_SIZE: int = Field(
        default=50,
        description="Page size used when the requested size is out of range"
    )
    MAX_PAGE_SIZE: int = Field(
        default=100,
        description="Largest accepted page size"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("MAX_PAGE_SIZE")
    def validate_max_page_size(cls, v):
        """Page size bound must be positive."""
        if v <= 0:
            raise ValueError("MAX_PAGE_SIZE must be positive")
        return v

    @validator("DEFAULT_PAGE_SIZE")
    def validate_default_page_size(cls, v, values):
        """Default page size must itself be an accepted size."""
        max_size = values.get("MAX_PAGE_SIZE", 100)
        if v <= 0 or v > max_size:
            raise ValueError(f"DEFAULT_PAGE_SIZE must be between 1 and {max_size}")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.ELASTICSEARCH_URL:
        errors.append("ELASTICSEARCH_URL is required")

    if not settings.ELASTICSEARCH_INDEX:
        errors.append("ELASTICSEARCH_INDEX is required")

    if not settings.REDIS_URL:
        errors.append("REDIS_URL is required")

    if not settings.OSM_BASE_URL:
        errors.append("OSM_BASE_URL is required")

    # The public tile servers reject anonymous clients
    if not settings.OSM_USER_AGENT.strip():
        errors.append("OSM_USER_AGENT must not be empty")

    if not 0 <= settings.MAP_ZOOM_LEVEL <= 19:
        errors.append("MAP_ZOOM_LEVEL must be between 0 and 19")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
