"""MCP models — JSON-RPC 2.0 envelopes, error codes and method names.

Implements the message format the gateway serves for the Model Context
Protocol: the capability handshake (``initialize``), tool discovery
(``tools/list``) and tool execution (``tools/call``).
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

RequestId = StrictInt | StrictFloat | StrictStr
"""JSON-RPC ids are strings or numbers; notifications carry none."""

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

# ---------------------------------------------------------------------------
# Error codes and supported methods
# ---------------------------------------------------------------------------


class ErrorCode(IntEnum):
    """JSON-RPC error codes: protocol codes plus the gateway's tool range."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Implementation-defined server range (-32000 to -32099)
    TOOL_EXECUTION_FAILED = -32000
    TOOL_NOT_FOUND = -32001


class MCPMethod(str, Enum):
    """Methods the gateway dispatches; anything else is ``METHOD_NOT_FOUND``."""

    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message; immutable once parsed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    jsonrpc: Literal["2.0"]
    method: str = Field(..., min_length=1)
    id: RequestId | None = None
    params: dict[str, Any] | list[Any] | None = None

    @property
    def is_notification(self) -> bool:
        """A request without an ``id`` member expects no response."""
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: JsonValue = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying a result or an error, never both."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId | None = None
    result: JsonValue = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exclusive(self) -> JsonRpcResponse:
        if self.error is not None and self.result is not None:
            msg = "a response carries either a result or an error"
            raise ValueError(msg)
        return self

    @classmethod
    def ok(cls, id: RequestId | None, result: Any) -> JsonRpcResponse:
        return cls(id=id, result=result)

    @classmethod
    def fail(
        cls,
        id: RequestId | None,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=id, error=JsonRpcError(code=int(code), message=message, data=data))

    def to_dict(self) -> dict[str, Any]:
        """Wire form with exactly one of ``result`` or ``error``."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ClientInfo(BaseModel):
    """Identity the client announces in ``initialize``."""

    name: str = ""
    version: str = ""


class InitializeParams(BaseModel):
    """Parameters of the ``initialize`` request."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default=DEFAULT_PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    client_info: ClientInfo = Field(default_factory=ClientInfo, alias="clientInfo")


class ServerInfo(BaseModel):
    """Identity the gateway returns from ``initialize``."""

    name: str = "mcpgate"
    version: str = "0.1.0"


class InitializeResult(BaseModel):
    """Result of the ``initialize`` handshake."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default=DEFAULT_PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(
        default_factory=lambda: {"tools": {"listChanged": False}}
    )
    server_info: ServerInfo = Field(default_factory=ServerInfo, alias="serverInfo")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
