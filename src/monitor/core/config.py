from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CorrelationSettings(BaseSettings):
    """Process-wide correlation values handed to services by their launcher."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    traceparent: str = ""
    flow_id: str = Field(default="", validation_alias="FLOW")


class TracingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GCP_", env_file=".env", extra="ignore")
    project_id: str = "proper-base"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")
    level: str = "INFO"


class HTTPSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HTTP_", env_file=".env", extra="ignore")
    connect_timeout: float = 5.0
    read_timeout: float = 60.0
    write_timeout: float = 10.0
    pool_timeout: float = 5.0
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keepalive_expiry: float = 30.0


class MonitorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = ""
    env: str = "local"

    # Nested settings
    correlation: CorrelationSettings = Field(default_factory=CorrelationSettings)
    tracing: TracingSettings = Field(default_factory=TracingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    http: HTTPSettings = Field(default_factory=HTTPSettings)


@lru_cache
def get_settings() -> MonitorSettings:
    """Get cached settings instance."""
    return MonitorSettings()
