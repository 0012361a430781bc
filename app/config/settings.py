"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

A single cached Settings instance is shared through get_settings().

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Separate read replica URL for the read/write split
- Connection pool tuning

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable SQL echo and verbose logging
        host: Server bind address
        port: Server port number
        database_url: Connection string for the write (primary) database
        read_database_url: Connection string for the read replica (optional)
        db_pool_size: Persistent connections per engine
        db_max_overflow: Extra connections allowed under load
        db_pool_timeout: Seconds to wait for a pooled connection
        db_pool_recycle: Seconds before a connection is recycled
        default_page_size: Page size used when the caller gives none
        max_page_size: Upper bound for a requested page size
        cors_origins: Allowed CORS origins (JSON array string)

    Example:
        >>> settings = Settings(read_database_url="postgresql://replica/catalog")
        >>> settings.has_read_replica
        True
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Product Catalog API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable SQL echo and verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/catalog.db",
        description="SQLAlchemy connection string for writes"
    )

    read_database_url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy connection string for reads (defaults to database_url)"
    )

    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_timeout: int = Field(default=30, ge=1, le=300)
    db_pool_recycle: int = Field(default=1800, ge=-1)

    # =========================================================================
    # PAGINATION SETTINGS
    # =========================================================================
    default_page_size: int = Field(
        default=20,
        ge=1,
        description="Page size used when the caller gives none"
    )

    max_page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Largest page size a caller may request"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to 'development'.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("read_database_url")
    @classmethod
    def validate_read_database_url(cls, value: Optional[str]) -> Optional[str]:
        """Treat a blank replica URL as unset."""
        if value is None or not value.strip():
            return None
        return value.strip()

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def effective_read_database_url(self) -> str:
        """URL used for reads: the replica if configured, else the primary."""
        return self.read_database_url or self.database_url

    @property
    def has_read_replica(self) -> bool:
        """True when reads go to a different database than writes."""
        return self.effective_read_database_url != self.database_url

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    @staticmethod
    def sqlite_path(database_url: str) -> Optional[Path]:
        """
        Extract the database file path from a SQLite URL.

        Returns:
            Path to database file, or None for in-memory and non-SQLite URLs
        """
        if not database_url.startswith("sqlite"):
            return None

        db_path = database_url.split("///", 1)[-1] if "///" in database_url else ""
        if not db_path or db_path == ":memory:":
            return None
        return Path(db_path)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug}, "
            f"read_replica={self.has_read_replica})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Uses lru_cache so only one Settings instance is created per process.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
