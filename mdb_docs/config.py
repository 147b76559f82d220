"""
Configuration management for MDB_DOCS.

Settings are read from the environment (or a ``.env`` file) through
pydantic-settings. ``ConnectionManager`` can still be built from direct
parameters; ``Settings`` is the convenient way to collect them.

Example:
    settings = get_settings()
    manager = ConnectionManager(
        mongo_uri=settings.mongo_uri,
        db_name=settings.db_name,
        max_pool_size=settings.max_pool_size,
        min_pool_size=settings.min_pool_size,
    )
"""

from functools import lru_cache

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_MIN_POOL_SIZE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    MAX_PAGE_SIZE,
    MIN_SERVER_SELECTION_TIMEOUT_MS,
)
from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    MongoDB and pagination settings.

    Environment variables:
      - MONGO_URI
      - DB_NAME
      - MONGO_MAX_POOL_SIZE
      - MONGO_MIN_POOL_SIZE
      - MONGO_SERVER_SELECTION_TIMEOUT_MS
      - DEFAULT_PAGE_SIZE
    """

    mongo_uri: str = Field(
        default="", validation_alias="MONGO_URI", description="MongoDB connection URI"
    )
    db_name: str = Field(default="", validation_alias="DB_NAME", description="Database name")
    max_pool_size: int = Field(
        default=DEFAULT_MAX_POOL_SIZE,
        validation_alias="MONGO_MAX_POOL_SIZE",
        ge=1,
        description="Maximum connection pool size",
    )
    min_pool_size: int = Field(
        default=DEFAULT_MIN_POOL_SIZE,
        validation_alias="MONGO_MIN_POOL_SIZE",
        ge=1,
        description="Minimum connection pool size",
    )
    server_selection_timeout_ms: int = Field(
        default=DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        validation_alias="MONGO_SERVER_SELECTION_TIMEOUT_MS",
        ge=MIN_SERVER_SELECTION_TIMEOUT_MS,
        description="Server selection timeout in milliseconds",
    )
    default_page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        validation_alias="DEFAULT_PAGE_SIZE",
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Page size used when a listing request does not give one",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _check_pool_bounds(self) -> "Settings":
        if self.min_pool_size > self.max_pool_size:
            raise ValueError(
                f"min_pool_size ({self.min_pool_size}) cannot be greater than "
                f"max_pool_size ({self.max_pool_size})"
            )
        return self

    def require_connection(self) -> None:
        """
        Ensure the connection settings needed to reach MongoDB are present.

        Raises:
            ConfigurationError: If MONGO_URI or DB_NAME is missing
        """
        if not self.mongo_uri:
            raise ConfigurationError(
                "mongo_uri is required (set MONGO_URI environment variable or pass directly)",
                config_key="MONGO_URI",
            )
        if not self.db_name:
            raise ConfigurationError(
                "db_name is required (set DB_NAME environment variable or pass directly)",
                config_key="DB_NAME",
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the process-wide settings object.

    Raises:
        ConfigurationError: If an environment value fails validation
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
