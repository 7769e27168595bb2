"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field
from sqlalchemy.engine import URL, make_url


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:3000", "https://localhost:3000"]
    )
    allow_credentials: bool = False
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(
        default=[
            "Origin",
            "Content-Type",
            "Accept",
            "Authorization",
            "X-Requested-With",
            "X-API-Key",
            "X-Request-ID",
        ]
    )
    expose_headers: list[str] = Field(default=["X-Request-ID"])
    max_age: int = Field(default=86400, description="Preflight cache in seconds")


class RateLimiterConfig(BaseModel):
    """Token bucket rate limiter configuration model."""

    enabled: bool = Field(default=True, description="Enable rate limiting")
    rate: float = Field(
        default=10.0, gt=0, description="Tokens added to the bucket per second"
    )
    burst: int = Field(default=20, ge=1, description="Bucket capacity")


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Logging environment"
    )
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str | None = Field(
        default=None,
        description="Full connection URL; overrides the individual fields when set",
    )
    driver: str = Field(default="postgresql+psycopg2", description="SQLAlchemy driver")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    user: str = Field(default="postgres", description="Database username")
    password: str | None = Field(default=None, description="Database password")
    name: str = Field(default="book_library", description="Database name")
    ssl_mode: str = Field(default="disable", description="PostgreSQL sslmode")
    max_connections: int = Field(
        default=25, ge=1, description="Maximum open connections"
    )
    max_idle_connections: int = Field(
        default=5, ge=0, description="Connections kept open in the pool"
    )
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    statement_timeout_ms: int = Field(
        default=30000, description="Server-side statement timeout in milliseconds"
    )
    auto_create: bool = Field(
        default=True, description="Create missing tables at application startup"
    )
    seed_sample_data: bool = Field(
        default=False, description="Insert sample books into an empty table at startup"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the database connection string."""
        if self.url:
            url = make_url(self.url)
            if url.password is None and self.password:
                url = url.set(password=self.password)
            return url.render_as_string(hide_password=False)

        url = URL.create(
            drivername=self.driver,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.name,
            query={"sslmode": self.ssl_mode} if self.driver.startswith("postgresql") else {},
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")

    @property
    def pool_size(self) -> int:
        """Connections kept open, never more than max_connections.

        SQLAlchemy reads a pool size of 0 as unbounded, so at least one
        connection is kept.
        """
        return max(min(self.max_idle_connections, self.max_connections), 1)

    @property
    def pool_overflow(self) -> int:
        """Connections allowed beyond the idle pool, bounded by max_connections."""
        return self.max_connections - self.pool_size


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=8080, description="Application port")
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )


class APIConfig(BaseModel):
    """HTTP API surface configuration."""

    base_path: str = Field(default="/api/v1", description="Versioned API prefix")
    enable_docs: bool = Field(default=True, description="Serve interactive API docs")
    docs_path: str = Field(default="/docs", description="Interactive API docs path")


class SecurityConfig(BaseModel):
    """Security configuration for API key checks and request guards."""

    enable_api_key: bool = Field(default=False, description="Require an API key")
    api_key_header: str = Field(
        default="X-API-Key", description="Header carrying the API key"
    )
    api_keys: list[str] = Field(default_factory=list, description="Accepted API keys")
    max_request_size: int = Field(
        default=1024 * 1024, description="Maximum request body size in bytes"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    api: APIConfig = Field(default_factory=APIConfig, description="API configuration")
    rate_limiter: RateLimiterConfig = Field(
        default_factory=RateLimiterConfig, description="Rate limiter configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
