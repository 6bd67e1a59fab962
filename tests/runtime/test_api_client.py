"""Tests for ApiClient status classification and decoding."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from mcpgate.runtime.api_client import ApiClient
from mcpgate.runtime.errors import ApiError, TransientError

BASE_URL = "https://api.example.com/v1"


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    api_key: str = "",
) -> ApiClient:
    return ApiClient(BASE_URL, api_key=api_key, transport=httpx.MockTransport(handler))


class TestApiClientRequests:
    async def test_get_decodes_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "12345", "name": "Jane"})

        async with _client(handler) as api:
            data = await api.get("customers/12345")

        assert data == {"id": "12345", "name": "Jane"}
        assert seen[0].method == "GET"
        assert seen[0].url == "https://api.example.com/v1/customers/12345"

    async def test_bearer_header_when_key_set(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler, api_key="secret") as api:
            await api.get("ping")

        assert seen[0].headers["Authorization"] == "Bearer secret"
        assert seen[0].headers["Accept"] == "application/json"

    async def test_no_auth_header_without_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with _client(handler) as api:
            await api.get("ping")

        assert "Authorization" not in seen[0].headers

    async def test_post_and_put_send_json(self) -> None:
        bodies: list[tuple[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append((request.method, json.loads(request.content)))
            return httpx.Response(201, json={"ok": True})

        async with _client(handler) as api:
            assert await api.post("customers", {"name": "Jane"}) == {"ok": True}
            assert await api.put("customers/1", {"email": "j@x.io"}) == {"ok": True}

        assert bodies == [("POST", {"name": "Jane"}), ("PUT", {"email": "j@x.io"})]

    async def test_empty_body_decodes_to_none(self) -> None:
        async with _client(lambda request: httpx.Response(204)) as api:
            assert await api.put("customers/1", {}) is None


class TestApiClientDelete:
    async def test_delete_success(self) -> None:
        async with _client(lambda request: httpx.Response(204)) as api:
            assert await api.delete("customers/1") is True

    async def test_delete_missing(self) -> None:
        async with _client(lambda request: httpx.Response(404)) as api:
            assert await api.delete("customers/1") is False

    async def test_delete_server_error_raises(self) -> None:
        async with _client(lambda request: httpx.Response(503)) as api:
            with pytest.raises(TransientError):
                await api.delete("customers/1")


class TestApiClientErrors:
    @pytest.mark.parametrize("code", [500, 503, 408, 429])
    async def test_transient_statuses(self, code: int) -> None:
        async with _client(lambda request: httpx.Response(code, text="busy")) as api:
            with pytest.raises(TransientError) as excinfo:
                await api.get("customers/1")
        assert excinfo.value.status_code == code
        assert excinfo.value.detail == "busy"

    @pytest.mark.parametrize("code", [400, 401, 404, 422])
    async def test_hard_statuses(self, code: int) -> None:
        async with _client(lambda request: httpx.Response(code)) as api:
            with pytest.raises(ApiError) as excinfo:
                await api.get("customers/1")
        assert not isinstance(excinfo.value, TransientError)
        assert excinfo.value.status_code == code

    async def test_detail_is_truncated(self) -> None:
        async with _client(lambda request: httpx.Response(500, text="x" * 2000)) as api:
            with pytest.raises(TransientError) as excinfo:
                await api.get("customers/1")
        assert len(excinfo.value.detail) == 500

    async def test_transport_errors_propagate(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(httpx.ConnectError):
                await api.get("customers/1")
