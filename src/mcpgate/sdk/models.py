"""Pydantic models for the settings YAML consumed by ``mcpgate serve``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from mcpgate.runtime.resilience.models import ResilienceConfig


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Bind address for the HTTP surface."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class GatewaySettings(BaseModel):
    """Top-level gateway settings parsed from YAML."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = "mcpgate"
    version: str = "0.1.0"
    api_url: str = Field(default="https://api.example.com", alias="apiUrl")
    api_key: str = Field(default="", alias="apiKey")
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    server: ServerSettings = Field(default_factory=ServerSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
