"""Settings loading and gateway assembly for the mcpgate SDK."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mcpgate.protocols.executor import ToolExecutor
from mcpgate.protocols.mcp.handler import MCPHandler
from mcpgate.protocols.mcp.models import ServerInfo
from mcpgate.protocols.registry import ToolRegistry
from mcpgate.runtime.api_client import ApiClient
from mcpgate.runtime.resilience.breaker import CircuitListener
from mcpgate.runtime.resilience.pipeline import PipelineRegistry
from mcpgate.sdk.errors import ConfigError
from mcpgate.sdk.models import GatewaySettings
from mcpgate.services.customers import register_customer_tools
from mcpgate.utils.telemetry import configure_telemetry

logger = logging.getLogger(__name__)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`GatewaySettings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    def load(self) -> GatewaySettings:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  Without a path
        the defaults are returned.

        Raises:
            ConfigError: On unreadable files, YAML parse errors or schema
                validation failures.
        """
        if self._path is None:
            return GatewaySettings()

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return GatewaySettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


class Gateway:
    """A fully wired gateway: pipelines, API client, tools, executor and handler.

    Usage::

        async with Gateway.from_yaml("gateway.yaml") as gateway:
            response = await gateway.handler.handle(raw_message)
    """

    def __init__(
        self,
        settings: GatewaySettings,
        *,
        registry: ToolRegistry,
        pipelines: PipelineRegistry,
        executor: ToolExecutor,
        handler: MCPHandler,
        api: ApiClient | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.pipelines = pipelines
        self.executor = executor
        self.handler = handler
        self.api = api

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        *,
        api: ApiClient | None = None,
        listener: CircuitListener | None = None,
        max_concurrency: int | None = None,
    ) -> Gateway:
        """Wire every component from *settings*.

        Steps:
        1. Optionally configure telemetry.
        2. Create the per-tool pipeline registry.
        3. Create the API client and register the customer tools on it.
        4. Build the executor and the MCP handler.
        """
        if settings.telemetry.enabled:
            configure_telemetry(
                service_name=settings.name,
                export_to_console=False,
                otlp_endpoint=settings.telemetry.otlp_endpoint,
            )

        pipelines = PipelineRegistry(settings.resilience, listener=listener)
        api = api or ApiClient(
            settings.api_url,
            api_key=settings.api_key,
            timeout=settings.resilience.timeout_seconds,
        )

        registry = ToolRegistry()
        register_customer_tools(registry, api)

        executor = ToolExecutor(registry, pipelines, max_concurrency=max_concurrency)
        handler = MCPHandler(
            registry,
            executor,
            server_info=ServerInfo(name=settings.name, version=settings.version),
        )
        logger.info("Gateway %s ready with %d tool(s)", settings.name, len(registry))
        return cls(
            settings,
            registry=registry,
            pipelines=pipelines,
            executor=executor,
            handler=handler,
            api=api,
        )

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> Gateway:
        """Load settings (defaults when *path* is ``None``) and wire a gateway."""
        settings = SettingsLoader(Path(path) if path is not None else None).load()
        return cls.from_settings(settings)

    async def __aenter__(self) -> Gateway:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the API client."""
        if self.api is not None:
            await self.api.close()
