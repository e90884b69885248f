"""Configuration schema using Pydantic.

Persisted to ~/.toolrpc/config.json; every section has usable defaults.
"""

from pathlib import Path

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """HTTP transport configuration."""
    host: str = "127.0.0.1"
    port: int = 8787
    path: str = "/mcp"
    protocol_version: str = "2024-11-05"  # Advertised by initialize
    server_name: str = "toolrpc"


class WeatherConfig(BaseModel):
    """OpenWeatherMap tool configuration."""
    enabled: bool = True
    api_key: str = ""  # Falls back to OPENWEATHER_API_KEY
    base_url: str = "https://api.openweathermap.org/data/2.5"
    units: str = "metric"  # metric | imperial | standard
    timeout_seconds: float = 10.0


class OutlookConfig(BaseModel):
    """Microsoft Graph (Outlook mail/calendar) tool configuration."""
    enabled: bool = True
    graph_base_url: str = "https://graph.microsoft.com/v1.0"
    timeout_seconds: float = 15.0
    # Pre-provisioned access tokens keyed by user id (service-level credential case).
    tokens: dict[str, str] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    """Log sink configuration."""
    level: str = "INFO"
    file_enabled: bool = True


class Config(BaseSettings):
    """Root configuration for toolrpc."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    weather: WeatherConfig = Field(default_factory=WeatherConfig)
    outlook: OutlookConfig = Field(default_factory=OutlookConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def log_dir(self) -> Path:
        return Path.home() / ".toolrpc" / "logs"

    model_config = ConfigDict(
        env_prefix="TOOLRPC_",
        env_nested_delimiter="__"
    )
