"""Tests for Gateway assembly."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, patch

import httpx

if TYPE_CHECKING:
    from pathlib import Path

from mcpgate.runtime.api_client import ApiClient
from mcpgate.sdk.gateway import Gateway
from mcpgate.sdk.models import GatewaySettings, TelemetrySettings


def _api(handler: httpx.MockTransport) -> ApiClient:
    return ApiClient("https://crm.example.com", transport=handler)


def _customer_api() -> ApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/customers/12345":
            return httpx.Response(200, json={"id": "12345", "name": "John Doe"})
        return httpx.Response(404, text="not found")

    return _api(httpx.MockTransport(handler))


class TestGatewayAssembly:
    async def test_registers_customer_tools(self) -> None:
        async with Gateway.from_settings(GatewaySettings(), api=_customer_api()) as gateway:
            names = [t.name for t in gateway.registry.list_tools()]
        assert names == ["get_customer", "create_customer", "update_customer", "delete_customer"]

    async def test_pipelines_use_resilience_settings(self) -> None:
        settings = GatewaySettings.model_validate({"resilience": {"maxRetryAttempts": 1}})
        async with Gateway.from_settings(settings, api=_customer_api()) as gateway:
            assert gateway.pipelines.config.max_retry_attempts == 1
            assert gateway.executor.pipelines is gateway.pipelines

    async def test_get_customer_end_to_end(self) -> None:
        message = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "get_customer", "arguments": {"customerId": "12345"}},
        }
        async with Gateway.from_settings(GatewaySettings(), api=_customer_api()) as gateway:
            response = await gateway.handler.handle(json.dumps(message))

        assert response is not None
        data = response.to_dict()
        assert data["id"] == 1
        assert data["result"]["toolName"] == "get_customer"
        assert data["result"]["success"] is True
        assert data["result"]["result"] == {"id": "12345", "name": "John Doe"}

    async def test_downstream_404_is_a_tool_failure(self) -> None:
        settings = GatewaySettings.model_validate({"resilience": {"maxRetryAttempts": 0}})
        async with Gateway.from_settings(settings, api=_customer_api()) as gateway:
            result = await gateway.executor.execute_one("get_customer", {"customerId": "999"})
            circuits = gateway.pipelines.circuits()
        assert result.success is False
        assert result.error_type == "retries_exhausted"
        assert "404" in (result.error or "")
        assert circuits["get_customer"]["failures"] == 0

    async def test_server_info_from_settings(self) -> None:
        settings = GatewaySettings(name="crm-gw", version="3.1.0")
        async with Gateway.from_settings(settings, api=_customer_api()) as gateway:
            response = await gateway.handler.handle(
                {"jsonrpc": "2.0", "id": 1, "method": "initialize"}
            )
        assert response is not None
        assert response.to_dict()["result"]["serverInfo"] == {"name": "crm-gw", "version": "3.1.0"}

    async def test_aclose_closes_api(self) -> None:
        api = AsyncMock(spec=ApiClient)
        gateway = Gateway.from_settings(GatewaySettings(), api=api)
        await gateway.aclose()
        api.close.assert_awaited_once()

    async def test_telemetry_enabled(self) -> None:
        settings = GatewaySettings(
            name="crm-gw",
            telemetry=TelemetrySettings(enabled=True, otlp_endpoint="http://collector:4317"),
        )
        with patch("mcpgate.sdk.gateway.configure_telemetry") as configure:
            gateway = Gateway.from_settings(settings, api=AsyncMock(spec=ApiClient))
        configure.assert_called_once_with(
            service_name="crm-gw",
            export_to_console=False,
            otlp_endpoint="http://collector:4317",
        )
        await gateway.aclose()

    async def test_telemetry_disabled_by_default(self) -> None:
        with patch("mcpgate.sdk.gateway.configure_telemetry") as configure:
            gateway = Gateway.from_settings(GatewaySettings(), api=AsyncMock(spec=ApiClient))
        configure.assert_not_called()
        await gateway.aclose()


class TestFromYaml:
    async def test_defaults_without_path(self) -> None:
        gateway = Gateway.from_yaml()
        try:
            assert gateway.settings == GatewaySettings()
            assert len(gateway.registry) == 4
        finally:
            await gateway.aclose()

    async def test_loads_file(self, tmp_path: Path) -> None:
        f = tmp_path / "gateway.yaml"
        f.write_text("name: from-file\napi_url: https://crm.example.com\n")
        gateway = Gateway.from_yaml(f)
        try:
            assert gateway.settings.name == "from-file"
        finally:
            await gateway.aclose()
