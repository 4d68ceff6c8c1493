"""Application configuration via pydantic-settings.

All connection parameters are loaded from environment variables (.env file).
Settings are organized into logical groups and composed into a single Settings object.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection and pool settings.

    Either ``DATABASE_URL`` or the individual ``DB_*`` variables are used.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = Field(default="", description="Single connection string (overrides DB_*)")
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_name: str = Field(default="movies")
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="")

    db_pool_size: int = Field(default=20, description="Maximum concurrent connections")
    # QueuePool has no idle timeout; this caps connection age instead
    db_idle_timeout: int = Field(default=30, description="Seconds before a pooled connection is recycled")
    db_connection_timeout: int = Field(default=2, description="Seconds to wait for a connection")
    db_ssl: bool | None = Field(
        default=None,
        description="TLS without certificate verification; on by default when DATABASE_URL is set",
    )

    @property
    def use_ssl(self) -> bool:
        if self.db_ssl is None:
            return bool(self.database_url)
        return self.db_ssl

    @property
    def async_url(self) -> URL:
        """Connection URL for the asyncpg driver."""
        if self.database_url:
            url = make_url(self.database_url)
            if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
                url = url.set(drivername="postgresql+asyncpg")
            return url
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


class CorsSettings(BaseSettings):
    """Origins allowed to call the API from a browser."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    frontend_url: str = Field(default="", description="Extra allowed origin for the deployed frontend")

    @property
    def allowed_origins(self) -> list[str]:
        origins = ["http://localhost:3000", "http://localhost:5173"]
        if self.frontend_url:
            origins.append(self.frontend_url)
        return origins


class Settings(BaseSettings):
    """Root settings composing all sub-settings.

    Usage:
        settings = Settings()
        settings.db.async_url
        settings.cors.allowed_origins
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Composed settings (loaded from same .env)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            msg = f"Invalid log level: {v}. Must be one of {valid}"
            raise ValueError(msg)
        return upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Module-level singleton — import this wherever settings are needed.
settings = Settings()
