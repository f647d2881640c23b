"""
Shared configuration management for the MQTT claims service.
"""

from typing import Optional
from urllib.parse import quote

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConnectionSettings(BaseSettings):
    """Connection settings for the claims database."""

    model_config = SettingsConfigDict(
        env_prefix="CLAIMS_DB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    host: str = "localhost"
    database: str = "mqtt"
    username: str = "mqtt"
    password: str = "mqtt"
    port: int = 5432
    pooling: bool = False
    timezone: str = "Europe/Berlin"

    def to_connection_string(self) -> str:
        """Get the keyword style connection string."""
        return (
            f"Server={self.host};Port={self.port};Database={self.database};"
            f"User Id={self.username};Password={self.password};"
            f"Pooling={self.pooling};Timezone={self.timezone}"
        )

    def to_dsn(self) -> str:
        """Get the connection URL understood by asyncpg."""
        user = quote(self.username, safe="")
        password = quote(self.password, safe="")
        return f"postgresql://{user}:{password}@{self.host}:{self.port}/{self.database}"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLAIMS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Storage
    store_backend: str = Field(default="postgres")
    database: DatabaseConnectionSettings = Field(default_factory=DatabaseConnectionSettings)

    # Observability
    enable_tracing: bool = Field(default=False)
    otel_exporter: Optional[str] = Field(default=None)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
