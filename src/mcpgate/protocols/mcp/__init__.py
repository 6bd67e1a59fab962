"""MCP protocol — JSON-RPC 2.0 server side of the Model Context Protocol."""

from mcpgate.protocols.mcp.handler import MCPHandler
from mcpgate.protocols.mcp.models import (
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPMethod,
    ServerInfo,
)
from mcpgate.protocols.mcp.transport import LineTransport, StdioServer, StdioTransport

__all__ = [
    "ErrorCode",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "LineTransport",
    "MCPHandler",
    "MCPMethod",
    "ServerInfo",
    "StdioServer",
    "StdioTransport",
]
