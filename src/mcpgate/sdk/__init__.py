"""mcpgate SDK — programmatic interface for loading settings and wiring a gateway."""

from mcpgate.sdk.errors import ConfigError
from mcpgate.sdk.gateway import Gateway, SettingsLoader
from mcpgate.sdk.models import GatewaySettings, ServerSettings, TelemetrySettings

__all__ = [
    "ConfigError",
    "Gateway",
    "GatewaySettings",
    "ServerSettings",
    "SettingsLoader",
    "TelemetrySettings",
]
