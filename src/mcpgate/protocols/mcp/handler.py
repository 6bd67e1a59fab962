"""MCPHandler — parses, validates and dispatches one JSON-RPC message at a time.

Stateless across messages.  Every inbound request yields exactly one
:class:`JsonRpcResponse`, including for malformed input; notifications are
processed and yield ``None``.  Tool failures are reported in the
implementation-defined error range so that "the tool failed" stays
distinguishable from "the request was malformed".
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from opentelemetry import trace
from pydantic import ValidationError

from mcpgate.protocols.errors import InvalidParamsError
from mcpgate.protocols.executor import ToolExecutor
from mcpgate.protocols.mcp.models import (
    ErrorCode,
    InitializeParams,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPMethod,
    RequestId,
    ServerInfo,
)
from mcpgate.protocols.models import ToolCallRequest
from mcpgate.protocols.registry import ToolRegistry
from mcpgate.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

Route = Callable[[JsonRpcRequest], Awaitable[JsonRpcResponse]]


class MCPHandler:
    """Routes ``initialize``, ``ping``, ``tools/list`` and ``tools/call``.

    Usage::

        handler = MCPHandler(registry, executor)
        response = await handler.handle('{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}')
        body = response.to_dict() if response else None
    """

    def __init__(
        self,
        registry: ToolRegistry,
        executor: ToolExecutor,
        *,
        server_info: ServerInfo | None = None,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._server_info = server_info or ServerInfo()
        self._routes: dict[MCPMethod, Route] = {
            MCPMethod.INITIALIZE: self._initialize,
            MCPMethod.INITIALIZED: self._initialized,
            MCPMethod.PING: self._ping,
            MCPMethod.TOOLS_LIST: self._tools_list,
            MCPMethod.TOOLS_CALL: self._tools_call,
        }

    async def handle(self, payload: str | bytes | Mapping[str, Any] | Any) -> JsonRpcResponse | None:
        """Process one raw message (JSON text or an already-decoded object)."""
        with _tracer.start_as_current_span("mcp.handle") as span:
            response = await self._handle(payload)
            if response is not None:
                if response.id is not None:
                    span.set_attribute(ATTR_RPC_ID, str(response.id))
                if response.error is not None:
                    span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Route a validated request to its method handler."""
        try:
            method = MCPMethod(request.method)
        except ValueError:
            return JsonRpcResponse.fail(
                request.id, ErrorCode.METHOD_NOT_FOUND, f"Method not found: {request.method}"
            )

        logger.debug("Dispatching %s (id=%s)", method.value, request.id)
        try:
            return await self._routes[method](request)
        except InvalidParamsError as exc:
            return JsonRpcResponse.fail(request.id, ErrorCode.INVALID_PARAMS, str(exc), exc.errors)
        except Exception:
            logger.exception("Internal error while handling %s (id=%s)", method.value, request.id)
            return JsonRpcResponse.fail(request.id, ErrorCode.INTERNAL_ERROR, "Internal error")

    async def _handle(self, payload: Any) -> JsonRpcResponse | None:
        if isinstance(payload, (str, bytes, bytearray)):
            try:
                payload = json.loads(payload)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                return JsonRpcResponse.fail(None, ErrorCode.PARSE_ERROR, "Parse error", str(exc))

        if not isinstance(payload, Mapping):
            return JsonRpcResponse.fail(
                None,
                ErrorCode.INVALID_REQUEST,
                "Invalid Request",
                "envelope must be a JSON object",
            )

        try:
            request = JsonRpcRequest.model_validate(dict(payload))
        except ValidationError as exc:
            return JsonRpcResponse.fail(
                _salvage_id(payload),
                ErrorCode.INVALID_REQUEST,
                "Invalid Request",
                _describe(exc),
            )

        trace.get_current_span().set_attribute(ATTR_RPC_METHOD, request.method)
        response = await self.dispatch(request)

        if request.is_notification:
            return None
        return response

    # -- routes -------------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = _validate(InitializeParams, request)
        logger.info(
            "Client %s %s initialized (protocol %s)",
            params.client_info.name or "<unnamed>",
            params.client_info.version,
            params.protocol_version,
        )
        result = InitializeResult(
            protocol_version=params.protocol_version,
            server_info=self._server_info,
        )
        return JsonRpcResponse.ok(request.id, result.to_dict())

    async def _initialized(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.ok(request.id, {})

    async def _ping(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.ok(request.id, {})

    async def _tools_list(self, request: JsonRpcRequest) -> JsonRpcResponse:
        tools = [tool.to_dict() for tool in self._registry.list_tools()]
        return JsonRpcResponse.ok(request.id, {"tools": tools})

    async def _tools_call(self, request: JsonRpcRequest) -> JsonRpcResponse:
        call = _validate(ToolCallRequest, request)
        execution = await self._executor.execute_one(call.name, call.arguments)
        if execution.success:
            return JsonRpcResponse.ok(request.id, execution.to_dict())

        code = (
            ErrorCode.TOOL_NOT_FOUND
            if execution.error_type == "tool_not_found"
            else ErrorCode.TOOL_EXECUTION_FAILED
        )
        return JsonRpcResponse.fail(
            request.id, code, execution.error or "tool execution failed", execution.to_dict()
        )


def _validate(model: Any, request: JsonRpcRequest) -> Any:
    """Decode ``request.params`` into *model*, raising :class:`InvalidParamsError`."""
    params = request.params
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise InvalidParamsError(
            request.method,
            [{"loc": "params", "msg": "params must be an object", "type": "dict_type"}],
        )
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        raise InvalidParamsError(request.method, _describe(exc)) from exc


def _salvage_id(payload: Mapping[str, Any]) -> RequestId | None:
    """Echo the raw id of an invalid request when it has a legal type."""
    raw = payload.get("id")
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, str)):
        return raw
    return None


def _describe(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "loc": ".".join(str(part) for part in error["loc"]),
            "msg": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
